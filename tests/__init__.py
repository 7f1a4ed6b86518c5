"""
Test suite for dfaudit.

- Unit tests for the manifest extractor, inventory collector, reconciler,
  deletion workflow, warehouse clients, configuration and CLI
"""
