"""Project an event record onto the fields the remote schema accepts."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING

from .errors import MissingKeyFieldError, NoUpdatableFieldsError
from .fields import FIELD_POLICIES, FieldName, FieldPolicy, FieldSchema

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .event import EventRecord


def format_discount(value: float) -> str:
    """Render a discount at full precision, without exponent or a trailing ``.0``."""

    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


_EXTRACTORS: Mapping[FieldName, Callable[[EventRecord], str | None]] = MappingProxyType(
    {
        FieldName.EMAIL: lambda record: record.email,
        FieldName.CAMPAIGN: lambda record: record.campaign,
        FieldName.DISCOUNT: lambda record: (
            format_discount(record.discount)
            if record.discount is not None and 0 <= record.discount <= 100
            else None
        ),
        FieldName.RESULT: lambda record: record.result,
        FieldName.VARIATION_ID: lambda record: record.variation_id,
        FieldName.HASHED_EMAIL: lambda record: record.hashed_email,
        FieldName.SOURCE: lambda record: record.source,
        FieldName.TIMESTAMP: lambda record: record.timestamp,
    }
)


@dataclass(frozen=True, slots=True)
class Projection:
    """Values to transmit for one event, keyed by field and restricted to the allowlist."""

    values: Mapping[FieldName, str]
    schema: FieldSchema

    def __post_init__(self) -> None:
        stray = [name for name in self.values if name not in self.schema.allowlist]
        if stray:
            listed = ", ".join(stray)
            raise ValueError(f"Fields outside the allowlist: {listed}")
        for name in self.schema.key_fields:
            if not self.values.get(name):
                raise MissingKeyFieldError(name)
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def key_values(self) -> dict[FieldName, str]:
        return {name: self.values[name] for name in self.schema.key_fields}

    def non_key_values(self) -> dict[FieldName, str]:
        return {
            name: value for name, value in self.values.items() if not self.schema.is_key(name)
        }


@dataclass(frozen=True, slots=True)
class UpdatePlan:
    keys: Mapping[FieldName, str]
    properties: Mapping[FieldName, str]
    timestamp_only: bool = False


def project(record: EventRecord, schema: FieldSchema) -> Projection:
    values: dict[FieldName, str] = {}
    for name in schema.allowlist:
        value = _EXTRACTORS[name](record)
        if value is None or value == "":
            if FIELD_POLICIES[name] is FieldPolicy.OMIT_WHEN_EMPTY:
                continue
            value = ""
        values[name] = value
    return Projection(values=values, schema=schema)


def plan_update(projection: Projection, *, timestamp: str) -> UpdatePlan:
    """Split a projection into match keys and settable properties.

    Key fields never appear among the properties. When nothing else is left to set,
    the schema's timestamp field is touched instead, even if it is not allowlisted.
    """

    schema = projection.schema
    keys = projection.key_values()
    properties = projection.non_key_values()
    if properties:
        return UpdatePlan(keys=keys, properties=properties)

    stamp_field = schema.timestamp_field
    if stamp_field is None:
        raise NoUpdatableFieldsError("Update has no settable fields and no timestamp field")
    return UpdatePlan(keys=keys, properties={stamp_field: timestamp}, timestamp_only=True)
