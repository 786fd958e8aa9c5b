"""Field vocabulary of the remote data extension row."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class FieldName(StrEnum):
    """Closed set of fields an event can project onto a row."""

    EMAIL = "Email"
    CAMPAIGN = "Campaign"
    DISCOUNT = "Discount"
    RESULT = "Result"
    VARIATION_ID = "VariationId"
    HASHED_EMAIL = "HashedEmail"
    SOURCE = "Source"
    TIMESTAMP = "Timestamp"

    @classmethod
    def parse(cls, value: str) -> FieldName:
        """Resolve a field by value or member name, ignoring case."""

        normalized = value.strip().lower()
        for member in cls:
            if normalized in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown field name: {value!r}")


class FieldPolicy(StrEnum):
    """How an unset value is transmitted."""

    # sent as "" so the stored value is blanked
    ALWAYS = "always"
    # left out so the stored value survives an update
    OMIT_WHEN_EMPTY = "omit_when_empty"


FIELD_POLICIES: Mapping[FieldName, FieldPolicy] = MappingProxyType(
    {
        FieldName.EMAIL: FieldPolicy.ALWAYS,
        FieldName.CAMPAIGN: FieldPolicy.ALWAYS,
        FieldName.DISCOUNT: FieldPolicy.OMIT_WHEN_EMPTY,
        FieldName.RESULT: FieldPolicy.ALWAYS,
        FieldName.VARIATION_ID: FieldPolicy.ALWAYS,
        FieldName.HASHED_EMAIL: FieldPolicy.ALWAYS,
        FieldName.SOURCE: FieldPolicy.ALWAYS,
        FieldName.TIMESTAMP: FieldPolicy.ALWAYS,
    }
)

DEFAULT_ALLOWLIST: tuple[FieldName, ...] = tuple(FieldName)
DEFAULT_KEY_FIELDS: tuple[FieldName, ...] = (FieldName.EMAIL, FieldName.CAMPAIGN)


class FieldSchemaError(ValueError):
    """Raised when an allowlist/key combination cannot describe a row."""


@dataclass(frozen=True, slots=True)
class FieldSchema:
    """Which fields the remote schema accepts and which of them form its key.

    ``timestamp_field`` is the column an update touches when it has nothing else to
    set. It may lie outside the allowlist and must not be a key; ``None`` disables
    the fallback.
    """

    allowlist: tuple[FieldName, ...] = DEFAULT_ALLOWLIST
    key_fields: tuple[FieldName, ...] = DEFAULT_KEY_FIELDS
    column_names: Mapping[FieldName, str] = field(default_factory=dict)
    timestamp_field: FieldName | None = FieldName.TIMESTAMP

    def __post_init__(self) -> None:
        if not self.allowlist:
            raise FieldSchemaError("Field allowlist must not be empty")
        if len(set(self.allowlist)) != len(self.allowlist):
            raise FieldSchemaError("Field allowlist contains duplicates")
        if not self.key_fields:
            raise FieldSchemaError("Key field list must not be empty")
        outside = [name for name in self.key_fields if name not in self.allowlist]
        if outside:
            listed = ", ".join(outside)
            raise FieldSchemaError(f"Key fields not in allowlist: {listed}")
        if self.timestamp_field is not None and self.timestamp_field in self.key_fields:
            raise FieldSchemaError(f"Timestamp field {self.timestamp_field} must not be a key")
        columns = [self.column(name) for name in self.writable_fields]
        if len(set(columns)) != len(columns):
            raise FieldSchemaError("Column name overrides collide")
        object.__setattr__(self, "column_names", MappingProxyType(dict(self.column_names)))

    @classmethod
    def from_names(
        cls,
        *,
        allowlist: Iterable[str] | None = None,
        key_fields: Iterable[str] | None = None,
        column_names: Mapping[str, str] | None = None,
        timestamp_field: str | None = FieldName.TIMESTAMP.value,
    ) -> FieldSchema:
        try:
            parsed_allowlist = (
                tuple(FieldName.parse(name) for name in allowlist)
                if allowlist is not None
                else DEFAULT_ALLOWLIST
            )
            parsed_keys = (
                tuple(FieldName.parse(name) for name in key_fields)
                if key_fields is not None
                else DEFAULT_KEY_FIELDS
            )
            parsed_columns = {
                FieldName.parse(name): column.strip()
                for name, column in (column_names or {}).items()
            }
            parsed_timestamp = (
                FieldName.parse(timestamp_field) if timestamp_field is not None else None
            )
        except ValueError as exc:
            raise FieldSchemaError(str(exc)) from exc
        return cls(
            allowlist=parsed_allowlist,
            key_fields=parsed_keys,
            column_names=parsed_columns,
            timestamp_field=parsed_timestamp,
        )

    @property
    def writable_fields(self) -> tuple[FieldName, ...]:
        """Allowlisted fields followed by the timestamp field when it is not among them."""

        if self.timestamp_field is None or self.timestamp_field in self.allowlist:
            return self.allowlist
        return (*self.allowlist, self.timestamp_field)

    def column(self, name: FieldName) -> str:
        return self.column_names.get(name) or name.value

    def is_key(self, name: FieldName) -> bool:
        return name in self.key_fields

    def columns(self, values: Mapping[FieldName, str]) -> dict[str, str]:
        """Rename a projected mapping to remote column names, keeping allowlist order."""

        return {
            self.column(name): values[name] for name in self.writable_fields if name in values
        }
