"""
Invocation of the Dataform compiler.

dfaudit only consumes the compiled graph; this module runs
``dataform compile <project> --json`` and stores its stdout as the manifest.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Union

from .exceptions import CompilationError


logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "dataform"


async def compile_project(
    project_dir: Union[str, Path],
    output_path: Union[str, Path],
    executable: str = DEFAULT_EXECUTABLE,
) -> Path:
    """
    Compile a Dataform project and write the JSON graph to ``output_path``.

    Raises:
        CompilationError: If the compiler is missing, exits non-zero or
            prints something that is not JSON
    """
    project_dir = Path(project_dir)
    output_path = Path(output_path)

    logger.info(f"Compiling Dataform project in {project_dir}")
    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            "compile",
            str(project_dir),
            "--json",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise CompilationError(
            f"Dataform executable not found: {executable}", cause=e
        ) from e

    stdout, stderr = await process.communicate()

    if process.returncode != 0:
        raise CompilationError(
            "Dataform compilation failed",
            details={
                "exit_code": process.returncode,
                "stderr": stderr.decode(errors="replace").strip(),
            },
        )

    try:
        output = stdout.decode()
        json.loads(output)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CompilationError("Dataform compiler did not print JSON", cause=e) from e

    output_path.write_text(output, encoding="utf-8")
    logger.info(f"Wrote compiled graph to {output_path}")
    return output_path
