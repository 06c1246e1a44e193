"""Async orchestration services consumed by the HTTP app and CLI."""
