"""Unit tests for canonical vocabulary construction and loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import EscalationVocabularyError
from tests.fixture_paths import fixture_path
from transforms.canonical_vocabulary import build_domain, default_vocabulary, load_vocabulary


def test_default_vocabulary_registers_display_names_as_synonyms() -> None:
    """Display names should be usable as lowercase synonyms."""
    vocabulary = default_vocabulary()

    assert vocabulary.buildings.synonyms["park hill south high school"] == "PHS"


def test_default_vocabulary_is_read_only() -> None:
    """Dictionaries should reject runtime mutation."""
    vocabulary = default_vocabulary()

    with pytest.raises(TypeError):
        vocabulary.teams.entities["OPS"] = vocabulary.teams.entities["INFRA"]  # type: ignore[index]


def test_build_domain_rejects_synonym_for_unknown_code() -> None:
    """Synonyms must point at codes present in the dictionary."""
    with pytest.raises(EscalationVocabularyError):
        build_domain("team", {"INFRA": "Infrastructure"}, {"ops": "OPS"}, 12)


def test_load_vocabulary_without_path_returns_defaults() -> None:
    """No override path should yield the built-in vocabulary."""
    vocabulary = load_vocabulary(None)

    assert "CN" in vocabulary.buildings.entities


def test_load_vocabulary_applies_override_file() -> None:
    """Override file domains should replace the built-in tables."""
    vocabulary = load_vocabulary(fixture_path("vocabulary/override.yaml"))

    assert vocabulary.teams.synonyms["networking team"] == "NET"


def test_load_vocabulary_keeps_max_code_length_per_domain() -> None:
    """Overridden domains should keep their fallback length bounds."""
    vocabulary = load_vocabulary(fixture_path("vocabulary/override.yaml"))

    assert vocabulary.buildings.max_code_length == 8


def test_load_vocabulary_raises_for_missing_file(tmp_path: Path) -> None:
    """A missing override file should fail with a vocabulary error."""
    with pytest.raises(EscalationVocabularyError):
        load_vocabulary(tmp_path / "missing.yaml")


def test_load_vocabulary_raises_for_entry_without_name(tmp_path: Path) -> None:
    """Entries must carry a string display name."""
    vocabulary_file = tmp_path / "bad.yaml"
    vocabulary_file.write_text("teams:\n  NET:\n    synonyms: [network]\n", encoding="utf-8")

    with pytest.raises(EscalationVocabularyError):
        load_vocabulary(vocabulary_file)
