"""histsearch - interactive, multi-dimensional shell history search."""

__version__ = "0.1.0"
