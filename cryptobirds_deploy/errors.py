"""Exception hierarchy shared by the compile and deploy entry points."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence


class DeploymentToolError(Exception):
    """Base class for every failure raised by :mod:`cryptobirds_deploy`."""


class ConfigurationError(DeploymentToolError, RuntimeError):
    """A required setting is missing or cannot be parsed."""


class CompilationError(DeploymentToolError):
    """The compiler reported at least one diagnostic with ``error`` severity."""

    def __init__(self, message: str, diagnostics: Sequence[Mapping[str, Any]] = ()) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics)


class ArtifactExtractionError(DeploymentToolError, LookupError):
    """The requested contract is absent from the compiler output."""


class ArtifactNotFoundError(DeploymentToolError, FileNotFoundError):
    """None of the candidate artifact paths held a parseable JSON file."""

    def __init__(self, message: str, candidates: Sequence[Path] = ()) -> None:
        super().__init__(message)
        self.candidates = list(candidates)

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ArtifactFormatError(DeploymentToolError, ValueError):
    """An artifact parsed as JSON but lacks a usable ``abi`` or ``bytecode``."""


class FeeCeilingExceededError(DeploymentToolError):
    """The estimated fee per gas is above the configured ceiling."""


class TransactionFailedError(DeploymentToolError):
    """A mined transaction reported ``status == 0``."""

    def __init__(self, message: str, receipt: Any = None) -> None:
        super().__init__(message)
        self.receipt = receipt


__all__ = [
    "ArtifactExtractionError",
    "ArtifactFormatError",
    "ArtifactNotFoundError",
    "CompilationError",
    "ConfigurationError",
    "DeploymentToolError",
    "FeeCeilingExceededError",
    "TransactionFailedError",
]
