"""Common type definitions for the concept network.

This module contains the concept record consumed by the graph builder,
the connection type enum shared by edges and network views, and the
exceptions raised at the input boundary.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

REQUIRED_FIELDS = ("id", "title", "category", "tags", "difficulty_range", "connections")


class ConceptNetworkError(Exception):
    """Base class for concept network errors."""


class ConceptValidationError(ConceptNetworkError, ValueError):
    """Raised when a concept record is malformed or the database is inconsistent."""


class ConnectionType(Enum):
    """Types of connections between two concepts."""

    PREREQUISITE = "prerequisite"
    APPLICATION = "application"
    RELATED = "related"


@dataclass(frozen=True)
class ConceptRecord:
    """A single concept from the concept database.

    Records are read-only: the engine never mutates them after loading.
    Keys of the source mapping that the engine does not use (for example
    multi-level explanations) are kept in ``extra``.
    """

    id: str
    title: str
    category: str
    tags: Tuple[str, ...] = ()
    difficulty_range: Tuple[int, int] = (1, 1)
    connections: Tuple[str, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        for name in ("id", "title", "category"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConceptValidationError(
                    f"Concept field '{name}' must be a non-empty string, got {value!r}"
                )

        if any(not isinstance(tag, str) for tag in self.tags):
            raise ConceptValidationError(f"Concept '{self.id}' has non-string tags")
        if any(not isinstance(ref, str) for ref in self.connections):
            raise ConceptValidationError(
                f"Concept '{self.id}' has non-string connection ids"
            )

        if len(self.difficulty_range) != 2 or not all(
            isinstance(v, int) and not isinstance(v, bool) for v in self.difficulty_range
        ):
            raise ConceptValidationError(
                f"Concept '{self.id}' difficulty_range must be two integers, "
                f"got {self.difficulty_range!r}"
            )
        if self.difficulty_range[0] > self.difficulty_range[1]:
            raise ConceptValidationError(
                f"Concept '{self.id}' difficulty_range low exceeds high: "
                f"{self.difficulty_range!r}"
            )

    @property
    def difficulty_low(self) -> int:
        return self.difficulty_range[0]

    @property
    def difficulty_high(self) -> int:
        return self.difficulty_range[1]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConceptRecord":
        """Create a record from a plain mapping.

        Args:
            data: Mapping with at least the required concept fields

        Returns:
            Validated ConceptRecord

        Raises:
            ConceptValidationError: If a required field is missing or ill-typed
        """
        if not isinstance(data, Mapping):
            raise ConceptValidationError(
                f"Concept entry must be a mapping, got {type(data).__name__}"
            )

        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise ConceptValidationError(
                f"Concept {data.get('id', '<unknown>')!r} is missing fields: "
                f"{', '.join(missing)}"
            )

        for name in ("tags", "difficulty_range", "connections"):
            if isinstance(data[name], (str, bytes)) or not isinstance(
                data[name], (list, tuple)
            ):
                raise ConceptValidationError(
                    f"Concept {data['id']!r} field '{name}' must be a list"
                )

        extra = copy.deepcopy({k: v for k, v in data.items() if k not in REQUIRED_FIELDS})
        return cls(
            id=data["id"],
            title=data["title"],
            category=data["category"],
            tags=tuple(data["tags"]),
            difficulty_range=tuple(data["difficulty_range"]),
            connections=tuple(data["connections"]),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to a JSON-compatible dictionary."""
        result = copy.deepcopy(self.extra)
        result.update(
            {
                "id": self.id,
                "title": self.title,
                "category": self.category,
                "tags": list(self.tags),
                "difficulty_range": list(self.difficulty_range),
                "connections": list(self.connections),
            }
        )
        return result
