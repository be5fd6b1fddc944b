"""
app/repositories/errors.py

Repository-layer exceptions for the speaker/talk catalogue.
"""

from __future__ import annotations


class CatalogRepositoryError(Exception):
    """Base exception for speaker/talk persistence failures."""


class DuplicateSpeakerError(CatalogRepositoryError):
    """Raised when a speaker with the same name already exists."""


class DuplicateTalkError(CatalogRepositoryError):
    """Raised when a talk with the same title already exists for the speaker."""
