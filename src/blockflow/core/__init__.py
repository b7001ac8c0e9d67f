"""Core subsystems: graph building, transforms, ingestion, config and logging."""
