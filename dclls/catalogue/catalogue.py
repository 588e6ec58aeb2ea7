"""
Completion Item Catalogue

Static vocabulary offered by the completion capability: DCL lexical
functions and common VMS commands.

Design Principles:
1. Data lives in catalogue.yml, not in code
2. Immutable once loaded (entries never change during a session)
3. Resolution data is looked up by identifier, never by branching
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import yaml


CATALOGUE_FILE = Path(__file__).parent / "catalogue.yml"

# Families in catalogue.yml, in the order they are offered.
FAMILIES = ("lexicals", "commands")


class CatalogueError(ValueError):
    """Raised when the catalogue data table is malformed."""


@dataclass(frozen=True)
class CatalogueEntry:
    """A single completion keyword and its resolution data."""

    identifier: int
    label: str
    detail: str
    documentation: str


@dataclass(frozen=True)
class Resolution:
    detail: str
    documentation: str


class Catalogue:
    """
    Ordered, immutable collection of completion entries.

    Usage:
        catalogue = load_catalogue()

        for entry in catalogue:
            print(entry.identifier, entry.label)

        resolution = catalogue.resolve(5)
    """

    def __init__(self, entries: Iterable[CatalogueEntry] = ()) -> None:
        self._entries = tuple(entries)

        resolutions: dict[int, Resolution] = {}
        labels: set[str] = set()
        for entry in self._entries:
            if entry.identifier in resolutions:
                raise CatalogueError(
                    f"Duplicate catalogue identifier: {entry.identifier}"
                )
            if entry.label in labels:
                raise CatalogueError(f"Duplicate catalogue label: {entry.label}")

            resolutions[entry.identifier] = Resolution(
                detail=entry.detail, documentation=entry.documentation
            )
            labels.add(entry.label)

        self._resolutions: Mapping[int, Resolution] = MappingProxyType(resolutions)

    def __iter__(self) -> Iterator[CatalogueEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[CatalogueEntry, ...]:
        return self._entries

    @property
    def resolutions(self) -> Mapping[int, Resolution]:
        """Read-only identifier -> resolution table."""
        return self._resolutions

    def resolve(self, identifier: int) -> Resolution | None:
        """Get resolution data for an identifier, or None if unknown."""
        return self._resolutions.get(identifier)


def parse_catalogue(data: Mapping | None) -> Catalogue:
    """
    Build a Catalogue from the parsed YAML document.

    Each family carries a shared ``detail`` string and a list of items
    with ``id``, ``label`` and ``documentation``.
    """
    if not data:
        return Catalogue()

    entries: list[CatalogueEntry] = []
    for family in FAMILIES:
        section = data.get(family)
        if not section:
            continue

        detail = section.get("detail")
        if not isinstance(detail, str):
            raise CatalogueError(f"Family '{family}' has no detail string")

        for item in section.get("items") or []:
            try:
                identifier = item["id"]
                label = item["label"]
                documentation = item["documentation"]
            except (KeyError, TypeError) as e:
                raise CatalogueError(
                    f"Malformed item in family '{family}': {item!r}"
                ) from e

            if not isinstance(identifier, int) or isinstance(identifier, bool):
                raise CatalogueError(f"Identifier for '{label}' is not an integer")

            entries.append(
                CatalogueEntry(
                    identifier=identifier,
                    label=str(label),
                    detail=detail,
                    documentation=str(documentation).strip(),
                )
            )

    return Catalogue(entries)


def load_catalogue(path: Path | None = None) -> Catalogue:
    """Load the catalogue from disk (defaults to the bundled catalogue.yml)."""
    path = path or CATALOGUE_FILE

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CatalogueError(f"Cannot parse catalogue {path}: {e}") from e

    return parse_catalogue(data)
