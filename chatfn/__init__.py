"""Command-line chat agent with model-invoked local functions."""
