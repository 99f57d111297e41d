"""Core application modules: logging, exceptions and middleware."""
