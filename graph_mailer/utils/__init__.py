"""Utilities: logging and RFC 822 parsing."""
