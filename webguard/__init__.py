"""CORS policy enforcement and Redis-backed rate limiting for HTTP request handlers."""

__version__ = "0.1.0"