"""Use cases (application services that orchestrate repositories)."""
