"""Free-text to canonical entity resolution.

This module maps raw team and building designations onto the canonical
vocabulary. Resolution is a fixed dictionary lookup, never fuzzy matching,
and it never fails: unseen input degrades to a stable synthesized code.
"""

from __future__ import annotations

import re

from core.constants import BUILDING_DOMAIN, TEAM_DOMAIN, UNKNOWN_ENTITY_CODE, UNKNOWN_ENTITY_NAME
from core.types import CanonicalEntity
from transforms.canonical_vocabulary import CanonicalDomain, CanonicalVocabulary

_NON_CODE_CHARACTERS = re.compile(r"[^A-Z0-9]")


def resolve_entity(
    vocabulary: CanonicalVocabulary,
    domain: str,
    raw_text: str | None,
) -> CanonicalEntity:
    """Resolve raw text to a canonical entity.

    Rules are applied in order and the first match wins: exact code,
    synonym phrase, case-insensitive code, synthesized fallback.

    Args:
        vocabulary: Read-only canonical vocabulary.
        domain: ``team`` or ``building``.
        raw_text: Raw designation; may be empty or None.

    Returns:
        Canonical entity with a non-empty code.

    Raises:
        EscalationVocabularyError: If the domain name is unknown.
    """
    dictionary = vocabulary.domain(domain)
    text = raw_text or ""
    exact = dictionary.entities.get(text)
    if exact is not None:
        return exact
    key = text.strip().lower()
    synonym_code = dictionary.synonyms.get(key)
    if synonym_code is not None and synonym_code in dictionary.entities:
        return dictionary.entities[synonym_code]
    for code, entity in dictionary.entities.items():
        if code.lower() == key:
            return entity
    return _fallback_entity(dictionary, text)


def resolve_team(vocabulary: CanonicalVocabulary, raw_text: str | None) -> CanonicalEntity:
    """Resolve a raw team designation."""
    return resolve_entity(vocabulary, TEAM_DOMAIN, raw_text)


def resolve_building(vocabulary: CanonicalVocabulary, raw_text: str | None) -> CanonicalEntity:
    """Resolve a raw building name or code."""
    return resolve_entity(vocabulary, BUILDING_DOMAIN, raw_text)


def synthesize_code(raw_text: str, max_length: int) -> str:
    """Derive an unofficial code from raw text.

    Args:
        raw_text: Raw designation.
        max_length: Maximum code length.

    Returns:
        Uppercase alphanumeric code, or ``UNKNOWN`` when nothing remains.
    """
    code = _NON_CODE_CHARACTERS.sub("", raw_text.upper())[:max_length]
    return code or UNKNOWN_ENTITY_CODE


def _fallback_entity(dictionary: CanonicalDomain, text: str) -> CanonicalEntity:
    code = synthesize_code(text, dictionary.max_code_length)
    return CanonicalEntity(code=code, name=text if text.strip() else UNKNOWN_ENTITY_NAME)
