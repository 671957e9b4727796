"""dependents-engine — reverse dependency lookups over a package registry."""

__version__ = "0.1.0"
