"""Chainfork exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class ForkError(Exception):
    """Base exception for all chainfork failures."""


class ForkConfigError(ForkError):
    """Raised for invalid runtime configuration."""


class ForkArtifactError(ForkError):
    """Raised when a required local artifact (binary, runtime) is missing."""


class ForkSourceError(ForkError):
    """Raised for state source transport and RPC failures."""


class ForkSnapshotError(ForkError):
    """Raised for pair snapshot write and cache read failures."""


class ForkGenesisError(ForkError):
    """Raised for chain spec template and merge failures."""
