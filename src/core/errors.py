"""Escalation pipeline exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Business-rule rejections are pipeline outcomes, not exceptions.
"""

from __future__ import annotations


class EscalationError(Exception):
    """Base exception for all escalation pipeline failures."""


class EscalationConfigError(EscalationError):
    """Raised for invalid runtime configuration."""


class EscalationIngestError(EscalationError):
    """Raised for raw record source parsing and loading failures."""


class EscalationStoreError(EscalationError):
    """Raised for document store read and write failures."""


class EscalationDependencyError(EscalationError):
    """Raised when an optional runtime dependency is missing."""


class EscalationVocabularyError(EscalationError):
    """Raised for invalid canonical vocabulary definitions."""
