"""Local code-context discovery: file matching, structure extraction and reference tracking."""

__version__ = "0.1.0"
