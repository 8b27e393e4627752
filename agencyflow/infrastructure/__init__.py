"""Infrastructure: persistence, security, and engine services."""
