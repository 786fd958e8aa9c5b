"""Reusable fakes and builders for reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from campaignsync.domain.event import EventRecord
from campaignsync.domain.outcome import Outcome
from campaignsync.domain.ports import Credential

if TYPE_CHECKING:
    from collections.abc import Mapping

    from campaignsync.domain.fields import FieldName

OCCURRED_AT = datetime(2025, 3, 21, 10, 30, tzinfo=UTC)


def make_record(**overrides: object) -> EventRecord:
    """Create the canonical test event, optionally overriding fields."""

    values: dict[str, object] = {
        "email": "a@b.com",
        "campaign": "spring",
        "discount": 10,
        "result": "won",
        "variation_id": "var-1",
        "occurred_at": OCCURRED_AT,
    }
    values.update(overrides)
    return EventRecord.create(**values)  # type: ignore[arg-type]


def ok_outcome(request_id: str = "req-ok") -> Outcome:
    return Outcome.from_fields(
        overall_status="OK",
        status_message="Created DataExtensionObject",
        request_id=request_id,
    )


def error_outcome(
    message: str,
    *,
    request_id: str = "req-err",
    codes: tuple[str, ...] = (),
) -> Outcome:
    return Outcome.from_fields(
        overall_status="Error",
        status_message=message,
        request_id=request_id,
        error_codes=codes,
    )


@dataclass(slots=True)
class FakeCredentials:
    acquired: int = 0

    def acquire(self) -> Credential:
        self.acquired += 1
        return Credential(access_token=f"token-{self.acquired}")


@dataclass(slots=True)
class ScriptedStore:
    """Remote store fake replaying queued outcomes and recording every call."""

    insert_outcomes: list[Outcome] = field(default_factory=list)
    update_outcomes: list[Outcome] = field(default_factory=list)
    inserts: list[dict[FieldName, str]] = field(default_factory=list)
    updates: list[tuple[dict[FieldName, str], dict[FieldName, str]]] = field(default_factory=list)

    @property
    def calls(self) -> int:
        return len(self.inserts) + len(self.updates)

    def insert(self, credential: Credential, values: Mapping[FieldName, str]) -> Outcome:
        del credential
        self.inserts.append(dict(values))
        return self.insert_outcomes.pop(0)

    def update(
        self,
        credential: Credential,
        keys: Mapping[FieldName, str],
        values: Mapping[FieldName, str],
    ) -> Outcome:
        del credential
        self.updates.append((dict(keys), dict(values)))
        return self.update_outcomes.pop(0)
