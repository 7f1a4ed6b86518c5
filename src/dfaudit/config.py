"""
Configuration system for dfaudit using Pydantic.
"""

import os
from pathlib import Path
from typing import Any, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .reconciler import ExclusionRule


class ExclusionConfig(BaseModel):
    """Tables that are never reported as unmanaged."""

    table_names: List[str] = Field(
        default_factory=list, description="Exact table names to ignore"
    )
    table_patterns: List[str] = Field(
        default_factory=list, description="Regular expressions for table names to ignore"
    )

    @field_validator("table_names", "table_patterns")
    @classmethod
    def drop_blank_entries(cls, v: List[str]) -> List[str]:
        return [item for item in v if item]

    def to_rule(self) -> ExclusionRule:
        """Build the exclusion rule used by the reconciler."""
        return ExclusionRule(
            name_patterns=list(self.table_patterns),
            exact_names=set(self.table_names),
        )


class DeletionConfig(BaseModel):
    """Deletion workflow configuration."""

    enabled: bool = Field(False, description="Delete unmanaged tables")
    auto_approve: bool = Field(
        False, description="Skip the per-table confirmation prompt"
    )


class WarehouseConfig(BaseModel):
    """Warehouse client configuration."""

    provider: str = Field("bigquery", description="Warehouse provider")
    location: Optional[str] = Field(
        None, description="Default BigQuery location for API calls"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING", description="Log level"
    )
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format for the log file",
    )
    file: Optional[str] = Field(None, description="Log file path")
    max_size: int = Field(10485760, description="Max log file size in bytes")  # 10MB
    backup_count: int = Field(5, description="Number of backup log files")


class AuditConfig(BaseSettings):
    """Main dfaudit configuration."""

    exclusions: ExclusionConfig = Field(
        default_factory=ExclusionConfig, description="Exclusion rules"
    )
    deletion: DeletionConfig = Field(
        default_factory=DeletionConfig, description="Deletion configuration"
    )
    warehouse: WarehouseConfig = Field(
        default_factory=WarehouseConfig, description="Warehouse configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DFAUDIT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "AuditConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            # Expand environment variables in the data
            data = cls._expand_env_vars(data)

            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @classmethod
    def _expand_env_vars(cls, data: Any) -> Any:
        """Recursively expand environment variables in configuration data."""
        if isinstance(data, dict):
            return {k: cls._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            return os.path.expandvars(data)
        else:
            return data

    def with_overrides(
        self,
        table_names: Optional[List[str]] = None,
        table_pattern: Optional[str] = None,
        delete: Optional[bool] = None,
        auto_approve: Optional[bool] = None,
    ) -> "AuditConfig":
        """Return a copy with command-line values merged in."""
        exclusions = self.exclusions.model_copy(
            update={
                "table_names": self.exclusions.table_names
                + [name for name in (table_names or []) if name],
                "table_patterns": self.exclusions.table_patterns
                + ([table_pattern] if table_pattern else []),
            }
        )
        deletion = self.deletion.model_copy(
            update={
                "enabled": self.deletion.enabled or bool(delete),
                "auto_approve": self.deletion.auto_approve or bool(auto_approve),
            }
        )
        return self.model_copy(update={"exclusions": exclusions, "deletion": deletion})
