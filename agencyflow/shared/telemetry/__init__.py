"""Logging and OpenTelemetry tracing."""
