"""Device metadata <-> xlsx workbook converter."""

__version__ = "0.1.0"
