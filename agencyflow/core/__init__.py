"""Core wiring: settings, lifespan, limiter, exception handlers, tenant context."""
