"""
Exception types shared across the analysis pipeline.

Only ImageLoadError and ConfigError are ever seen by callers of
orchestrator.analyse_images(); the other two are absorbed inside the
pipeline (see normalizer.py and orchestrator.py).
"""
from __future__ import annotations


class PackagingAnalyserError(Exception):
    """Base class for every error raised by this project."""


class ConfigError(PackagingAnalyserError):
    """A required setting is missing or invalid."""


class ImageLoadError(PackagingAnalyserError):
    """The source image could not be read or decoded."""


class RemoteAnalysisError(PackagingAnalyserError):
    """The vision provider call failed (network, auth, timeout, bad reply)."""

    def __init__(self, message: str, provider_name: str = "") -> None:
        self.provider_name = provider_name
        prefix = f"[{provider_name}] " if provider_name else ""
        super().__init__(f"{prefix}{message}")


class ResponseParseError(PackagingAnalyserError, ValueError):
    """No extraction strategy could recover an analysis from the reply."""
