"""Rep counting and workout scheduling cores."""

__version__ = "0.1.0"
