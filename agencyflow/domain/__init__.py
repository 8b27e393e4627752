"""Domain layer: enums and exceptions for workflow automation."""
