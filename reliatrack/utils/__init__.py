"""Shared utilities: logging, security and the AI HTTP client."""
