"""Tests for concept records and concept database loading."""

import json

import pytest

from conceptnetwork.loader import (
    DEFAULT_CONCEPTS_FILE,
    load_concepts,
    load_default_concepts,
    parse_concepts,
)
from conceptnetwork.types import ConceptRecord, ConceptValidationError


class TestConceptRecord:
    """Test record validation."""

    def test_from_dict(self, concept_factory):
        """Lists become tuples and extra keys are kept."""
        data = concept_factory("limits", [5, 8], ["derivatives"], tags=["calculus"])
        data["explanations"] = {}

        concept = ConceptRecord.from_dict(data)

        assert concept.tags == ("calculus",)
        assert concept.difficulty_range == (5, 8)
        assert concept.difficulty_low == 5
        assert concept.difficulty_high == 8
        assert concept.extra == {"explanations": {}}
        assert concept.to_dict()["connections"] == ["derivatives"]

    def test_missing_field(self, concept_factory):
        """Missing required fields are reported by name."""
        data = concept_factory("limits", [5, 8])
        del data["difficulty_range"]

        with pytest.raises(ConceptValidationError, match="difficulty_range"):
            ConceptRecord.from_dict(data)

    @pytest.mark.parametrize(
        "difficulty_range",
        [[5, 2], [1], [1, 2, 3], ["1", "2"], [1.5, 2]],
    )
    def test_invalid_difficulty(self, concept_factory, difficulty_range):
        """Difficulty ranges must be two ordered integers."""
        with pytest.raises(ConceptValidationError):
            ConceptRecord.from_dict(concept_factory("x", difficulty_range))

    def test_string_tags_rejected(self, concept_factory):
        """A bare string is not accepted as a tag list."""
        data = concept_factory("x", [1, 2])
        data["tags"] = "algebra"

        with pytest.raises(ConceptValidationError, match="tags"):
            ConceptRecord.from_dict(data)

    def test_empty_id_rejected(self, concept_factory):
        """Identifiers must be non-empty strings."""
        with pytest.raises(ConceptValidationError, match="id"):
            ConceptRecord.from_dict(concept_factory("", [1, 2], title="Empty"))

    def test_validation_error_is_value_error(self):
        """Validation errors can be handled as ValueError."""
        assert issubclass(ConceptValidationError, ValueError)


class TestLoadConcepts:
    """Test loading concept databases from JSON."""

    def test_load_list(self, tmp_path, concept_factory):
        """A JSON array of concepts is loaded in order."""
        path = tmp_path / "concepts.json"
        path.write_text(
            json.dumps([concept_factory("b", [1, 2]), concept_factory("a", [1, 2])]),
            encoding="utf-8",
        )

        assert [c.id for c in load_concepts(path)] == ["b", "a"]

    def test_load_wrapped(self, tmp_path, concept_factory):
        """An object with a concepts array is accepted."""
        path = tmp_path / "concepts.json"
        path.write_text(json.dumps({"concepts": [concept_factory("a", [1, 2])]}))

        assert [c.id for c in load_concepts(str(path))] == ["a"]

    def test_invalid_json(self, tmp_path):
        """Unparseable files raise a validation error."""
        path = tmp_path / "broken.json"
        path.write_text("[{")

        with pytest.raises(ConceptValidationError, match="Invalid JSON"):
            load_concepts(path)

    def test_wrong_shape(self, tmp_path):
        """Files without a concept list are rejected."""
        path = tmp_path / "shape.json"
        path.write_text(json.dumps({"items": []}))

        with pytest.raises(ConceptValidationError):
            load_concepts(path)

    def test_missing_file(self, tmp_path):
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_concepts(tmp_path / "nope.json")

    def test_duplicate_ids(self, concept_factory):
        """Duplicate ids are rejected."""
        with pytest.raises(ConceptValidationError, match="Duplicate concept id 'a'"):
            parse_concepts([concept_factory("a", [1, 2]), concept_factory("a", [3, 4])])

    def test_default_database(self):
        """The bundled core database loads."""
        concepts = load_default_concepts()

        assert DEFAULT_CONCEPTS_FILE.exists()
        assert len(concepts) == 14
        assert concepts[0].id == "natural_numbers"
        assert concepts[0].title == "Natural Numbers"
