"""forcerm - force-delete directory trees that resist normal removal."""

__version__ = "0.1.0"
