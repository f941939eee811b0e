"""Errors raised while building the Pulumi program.

These are local failures: Pulumi surfaces them and aborts before any call
reaches AWS.
"""

from pathlib import Path


class InfraError(Exception):
    """Base exception for stack definition errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(InfraError):
    """Stack configuration is missing or inconsistent."""


class MissingAssetError(InfraError):
    """A local file that must be uploaded does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Required asset not found: {path}")
        self.path = path


class TrustPolicyError(InfraError):
    """A federated trust condition would not be an exact match."""

    def __init__(self, message: str, subject: str | None = None) -> None:
        super().__init__(message)
        self.subject = subject
