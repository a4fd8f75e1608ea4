"""Run configuration (YAML + JSON Schema)."""
