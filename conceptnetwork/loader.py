"""Concept database loading.

The concept database is a JSON array of concept objects, or a JSON object
with a ``"concepts"`` array. A small core database ships with the package.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Union

from .types import ConceptRecord, ConceptValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONCEPTS_FILE = Path(__file__).parent / "data" / "core_concepts.json"


def parse_concepts(entries: Iterable[Union[ConceptRecord, Mapping[str, Any]]]) -> List[ConceptRecord]:
    """Convert raw entries to validated concept records, preserving order.

    Args:
        entries: Concept records or plain mappings

    Returns:
        List of ConceptRecord

    Raises:
        ConceptValidationError: If an entry is malformed or an id repeats
    """
    records: List[ConceptRecord] = []
    seen_ids = set()

    for position, entry in enumerate(entries):
        record = entry if isinstance(entry, ConceptRecord) else ConceptRecord.from_dict(entry)
        if record.id in seen_ids:
            raise ConceptValidationError(
                f"Duplicate concept id '{record.id}' at position {position}"
            )
        seen_ids.add(record.id)
        records.append(record)

    return records


def load_concepts(path: Union[str, Path]) -> List[ConceptRecord]:
    """Load a concept database from a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        List of ConceptRecord in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ConceptValidationError: If the content is not a valid concept database
    """
    path = Path(path)
    logger.info(f"Loading concept database from {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConceptValidationError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("concepts")
    if not isinstance(data, list):
        raise ConceptValidationError(
            f"{path} must contain a list of concepts or an object with a 'concepts' list"
        )

    records = parse_concepts(data)
    logger.info(f"Loaded {len(records)} concepts from {path.name}")
    return records


def load_default_concepts() -> List[ConceptRecord]:
    """Load the core concept database bundled with the package."""
    return load_concepts(DEFAULT_CONCEPTS_FILE)
