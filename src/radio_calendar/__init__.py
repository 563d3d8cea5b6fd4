"""Radio Calendar - weekly recurring playlist schedule editor."""

__version__ = "1.0.0"
