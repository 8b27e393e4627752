"""Application services: condition evaluation, step registry, definitions."""
