"""grokstat - query game servers and normalize their replies."""

__version__ = "0.4.0"
