"""Canonical team and building dictionaries.

This module holds the controlled vocabulary used to canonicalize free-text
team and building designations. The vocabulary is built once at process
start and passed explicitly to the resolver; it is never mutated at runtime.
Changes to the built-in tables ship with a new deployment, or through a
YAML override file named by ``ESCALATIONS_VOCABULARY_FILE``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, cast

from core.constants import (
    BUILDING_CODE_MAX_LENGTH,
    BUILDING_DOMAIN,
    TEAM_CODE_MAX_LENGTH,
    TEAM_DOMAIN,
)
from core.errors import EscalationDependencyError, EscalationVocabularyError
from core.types import CanonicalEntity

TEAM_NAMES: Mapping[str, str] = {
    "INFRA": "Infrastructure",
    "APPS": "Applications",
    "DEV": "Developers",
    "AV": "AV",
}

TEAM_SYNONYMS: Mapping[str, str] = {
    "infra": "INFRA",
    "infrastructure": "INFRA",
    "apps": "APPS",
    "applications": "APPS",
    "dev": "DEV",
    "developers": "DEV",
    "audiovisual": "AV",
    "av": "AV",
}

BUILDING_NAMES: Mapping[str, str] = {
    "CN": "Chinn Elementary",
    "EL": "English Landing Elementary",
    "GR": "Graden Elementary",
    "HW": "Hawthorn Elementary",
    "HP": "Hopewell Elementary",
    "LC": "Line Creek Elementary",
    "PP": "Prairie Point Elementary",
    "RN": "Renner Elementary",
    "SE": "Southeast Elementary",
    "TR": "Tiffany Ridge Elementary",
    "UC": "Union Chapel Elementary",
    "CG": "Congress Middle School",
    "LV": "Lakeview Middle School",
    "PL": "Plaza Middle School",
    "WL": "Walden Middle School",
    "LD": "LEAD Innovation Studio",
    "PHHS": "Park Hill High School",
    "PHS": "Park Hill South High School",
    "AQ": "Aquatic Center",
}

BUILDING_SYNONYMS: Mapping[str, str] = {
    "chinn": "CN",
    "english landing": "EL",
    "graden": "GR",
    "hawthorn": "HW",
    "hopewell": "HP",
    "line creek": "LC",
    "prairie point": "PP",
    "renner": "RN",
    "southeast": "SE",
    "tiffany ridge": "TR",
    "union chapel": "UC",
    "congress": "CG",
    "lakeview": "LV",
    "plaza": "PL",
    "walden": "WL",
    "lead": "LD",
    "park hill high": "PHHS",
    "park hill south": "PHS",
    "aquatic center": "AQ",
}


@dataclass(frozen=True)
class CanonicalDomain:
    """One independent dictionary domain.

    Attributes:
        name: Domain identifier, ``team`` or ``building``.
        entities: Code to canonical entity mapping.
        synonyms: Lowercase free-text phrase to code mapping.
        max_code_length: Length bound for synthesized fallback codes.
    """

    name: str
    entities: Mapping[str, CanonicalEntity]
    synonyms: Mapping[str, str]
    max_code_length: int


@dataclass(frozen=True)
class CanonicalVocabulary:
    """Read-only team and building vocabulary."""

    teams: CanonicalDomain
    buildings: CanonicalDomain

    def domain(self, name: str) -> CanonicalDomain:
        """Return the dictionary domain for a domain name.

        Raises:
            EscalationVocabularyError: If the domain name is unknown.
        """
        if name == TEAM_DOMAIN:
            return self.teams
        if name == BUILDING_DOMAIN:
            return self.buildings
        raise EscalationVocabularyError(
            f"Unknown vocabulary domain '{name}'. "
            f"Use '{TEAM_DOMAIN}' or '{BUILDING_DOMAIN}'."
        )


def build_domain(
    name: str,
    display_names: Mapping[str, str],
    synonyms: Mapping[str, str],
    max_code_length: int,
) -> CanonicalDomain:
    """Build a frozen dictionary domain.

    Each display name is registered as an extra synonym of its code so that
    a persisted display name resolves back to the same code. Explicit
    synonyms take precedence over display-name synonyms.

    Args:
        name: Domain identifier.
        display_names: Code to display name mapping.
        synonyms: Phrase to code mapping; phrases are lowercased and trimmed.
        max_code_length: Fallback code length bound.

    Returns:
        Read-only canonical domain.

    Raises:
        EscalationVocabularyError: If a synonym targets an unknown code.
    """
    entities = {
        code: CanonicalEntity(code=code, name=display_name)
        for code, display_name in display_names.items()
    }
    merged_synonyms = {
        display_name.strip().lower(): code for code, display_name in display_names.items()
    }
    for phrase, code in synonyms.items():
        if code not in entities:
            raise EscalationVocabularyError(
                f"Synonym '{phrase}' in {name} vocabulary maps to unknown code '{code}'. "
                "Add the code to the dictionary or fix the synonym."
            )
        merged_synonyms[phrase.strip().lower()] = code
    return CanonicalDomain(
        name=name,
        entities=MappingProxyType(entities),
        synonyms=MappingProxyType(merged_synonyms),
        max_code_length=max_code_length,
    )


def default_vocabulary() -> CanonicalVocabulary:
    """Build the built-in deploy-time vocabulary."""
    return CanonicalVocabulary(
        teams=build_domain(TEAM_DOMAIN, TEAM_NAMES, TEAM_SYNONYMS, TEAM_CODE_MAX_LENGTH),
        buildings=build_domain(
            BUILDING_DOMAIN, BUILDING_NAMES, BUILDING_SYNONYMS, BUILDING_CODE_MAX_LENGTH
        ),
    )


def load_vocabulary(path: Path | None) -> CanonicalVocabulary:
    """Load the vocabulary, applying an optional YAML override file.

    The file holds ``teams`` and/or ``buildings`` mappings of
    ``CODE: {name: ..., synonyms: [...]}``. Domains absent from the file
    keep their built-in tables.

    Args:
        path: Override file path, or None for built-in tables only.

    Returns:
        Read-only vocabulary.

    Raises:
        EscalationDependencyError: If PyYAML is unavailable.
        EscalationVocabularyError: If the file is missing or malformed.
    """
    vocabulary = default_vocabulary()
    if path is None:
        return vocabulary
    payload = _load_yaml_payload(path)
    teams = vocabulary.teams
    buildings = vocabulary.buildings
    if "teams" in payload:
        teams = _parse_domain(payload["teams"], TEAM_DOMAIN, TEAM_CODE_MAX_LENGTH, path)
    if "buildings" in payload:
        buildings = _parse_domain(
            payload["buildings"], BUILDING_DOMAIN, BUILDING_CODE_MAX_LENGTH, path
        )
    return CanonicalVocabulary(teams=teams, buildings=buildings)


def _load_yaml_payload(path: Path) -> Mapping[str, object]:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise EscalationDependencyError(
            "Vocabulary override files require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    if not path.exists():
        raise EscalationVocabularyError(
            f"Vocabulary file does not exist at {path}. "
            "Unset ESCALATIONS_VOCABULARY_FILE or provide a valid YAML file."
        )
    try:
        payload = cast(object, yaml.safe_load(path.read_text(encoding="utf-8")))
    except OSError as error:
        raise EscalationVocabularyError(
            f"Failed to read vocabulary file at {path}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise EscalationVocabularyError(
            f"Failed to parse vocabulary file at {path}: {error}. Fix YAML syntax and retry."
        ) from error
    if not isinstance(payload, Mapping):
        raise EscalationVocabularyError(
            f"Vocabulary file at {path} must contain a mapping with 'teams' or 'buildings'."
        )
    return payload


def _parse_domain(
    value: object,
    domain_name: str,
    max_code_length: int,
    path: Path,
) -> CanonicalDomain:
    if not isinstance(value, Mapping) or not value:
        raise EscalationVocabularyError(
            f"Vocabulary file at {path}: '{domain_name}' entries must be a non-empty mapping."
        )
    display_names: dict[str, str] = {}
    synonyms: dict[str, str] = {}
    for code, entry in value.items():
        code_text = str(code)
        if not isinstance(entry, Mapping) or not isinstance(entry.get("name"), str):
            raise EscalationVocabularyError(
                f"Vocabulary file at {path}: {domain_name} code '{code_text}' "
                "needs a string 'name' field."
            )
        display_names[code_text] = entry["name"]
        raw_synonyms = entry.get("synonyms", [])
        if not isinstance(raw_synonyms, list):
            raise EscalationVocabularyError(
                f"Vocabulary file at {path}: synonyms for {domain_name} code "
                f"'{code_text}' must be a list."
            )
        for phrase in raw_synonyms:
            synonyms[str(phrase)] = code_text
    return build_domain(domain_name, display_names, synonyms, max_code_length)
