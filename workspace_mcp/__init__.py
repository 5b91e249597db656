"""OAuth 2.1 proxy primitives, token handling, sealed storage and Gmail message composition."""

__version__ = "0.5.0"