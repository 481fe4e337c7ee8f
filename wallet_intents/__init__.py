"""Natural-language wallet requests to validated, executable action records."""

__version__ = "0.1.0"
