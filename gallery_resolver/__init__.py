"""Gallery Resolver: album records to a canonical photo list."""

__version__ = "0.1.0"
