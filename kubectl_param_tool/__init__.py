"""Check whether an API server's OpenAPI v3 schema supports a query parameter."""

__version__ = "0.1.0"
