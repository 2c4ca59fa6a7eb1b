"""Catalog schema - Entries to install, from rows or TOML files.

A catalog is an ordered list of entries. Each row has two or three fields:
name, numeric File Exchange identifier, and an optional "owner/repo"
reference to an alternate repository. Validation happens up front so a
malformed catalog fails the whole run before any network access.
"""

import re
import tomllib
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StrictInt
from pydantic import ValidationError
from pydantic import field_validator
from pydantic import model_validator

from .exceptions import CatalogError

_REPO_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class CatalogEntry(BaseModel):
    """One installable File Exchange entry (immutable)."""

    model_config = ConfigDict(frozen=True)

    name: str
    identifier: StrictInt = Field(gt=0)
    alternate_repo: str | None = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must be non-empty text")
        # Used as a directory name directly under the destination
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"name {value!r} is not a valid directory name")
        return value

    @field_validator("alternate_repo")
    @classmethod
    def _check_repo(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().strip("/")
        if not value:
            return None
        if not _REPO_PATTERN.match(value):
            raise ValueError(f"alternate_repo must look like 'owner/repo', got {value!r}")
        return value

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "CatalogEntry":
        """Build an entry from a 2- or 3-field row.

        Raises:
            CatalogError: If the row has the wrong shape or invalid values
        """
        if isinstance(row, str | bytes) or len(row) not in (2, 3):
            raise CatalogError(
                f"Catalog rows must have 2 or 3 fields (name, identifier[, alternate_repo]), got {row!r}",
                context={"row": repr(row)},
            )
        if not isinstance(row[0], str):
            raise CatalogError(f"Catalog entry name must be text, got {row[0]!r}", context={"row": repr(row)})

        fields: dict[str, Any] = {"name": row[0], "identifier": row[1]}
        if len(row) == 3:
            fields["alternate_repo"] = row[2]
        try:
            return cls(**fields)
        except ValidationError as e:
            raise CatalogError(f"Invalid catalog row {row!r}: {e}", context={"row": repr(row)}) from e


class Catalog(BaseModel):
    """Ordered, validated collection of catalog entries."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[CatalogEntry, ...] = ()

    @model_validator(mode="after")
    def _check_unique_names(self) -> "Catalog":
        seen: set[str] = set()
        for entry in self.entries:
            if entry.name in seen:
                raise ValueError(f"duplicate catalog entry name: {entry.name!r}")
            seen.add(entry.name)
        return self

    def __iter__(self) -> Iterator[CatalogEntry]:  # type: ignore[override]
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, name: str) -> CatalogEntry | None:
        """Look up an entry by name."""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any] | CatalogEntry]) -> "Catalog":
        """
        Build a catalog from rows (or ready-made entries).

        Args:
            rows: Iterable of (name, identifier) or (name, identifier, alternate_repo)

        Returns:
            Validated Catalog preserving row order

        Raises:
            CatalogError: If any row is malformed or names repeat

        Example:
            >>> catalog = Catalog.from_rows([("widget", 12345), ("export_fig", 23629, "altmany/export_fig")])
            >>> [entry.name for entry in catalog]
            ['widget', 'export_fig']
        """
        entries = [row if isinstance(row, CatalogEntry) else CatalogEntry.from_row(row) for row in rows]
        try:
            return cls(entries=tuple(entries))
        except ValidationError as e:
            raise CatalogError(f"Invalid catalog: {e}") from e

    @classmethod
    def from_toml(cls, catalog_path: Path) -> "Catalog":
        """
        Load a catalog from a TOML file.

        Format:
            [[entry]]
            name = "export_fig"
            identifier = 23629
            alternate_repo = "altmany/export_fig"   # optional

        Raises:
            CatalogError: If the file is missing, unparsable or has invalid rows
        """
        if not catalog_path.exists():
            raise CatalogError(f"Catalog file not found: {catalog_path}", context={"path": str(catalog_path)})

        try:
            with open(catalog_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise CatalogError(f"Invalid TOML in {catalog_path}: {e}", context={"path": str(catalog_path)}) from e

        tables = data.get("entry", [])
        if not isinstance(tables, list):
            raise CatalogError(f"[[entry]] tables expected in {catalog_path}", context={"path": str(catalog_path)})

        rows = []
        for table in tables:
            if not isinstance(table, dict) or "name" not in table or "identifier" not in table:
                raise CatalogError(
                    f"Each [[entry]] needs 'name' and 'identifier' in {catalog_path}, got {table!r}",
                    context={"path": str(catalog_path)},
                )
            row = [table["name"], table["identifier"]]
            if table.get("alternate_repo"):
                row.append(table["alternate_repo"])
            rows.append(row)

        return cls.from_rows(rows)
