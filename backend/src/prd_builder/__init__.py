"""PRD builder - chat client for staged product requirements reviews."""

__version__ = "0.1.0"
