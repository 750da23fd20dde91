"""Core infrastructure: paths, settings, host capabilities and run logs."""
