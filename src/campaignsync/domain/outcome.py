"""Decoded result of one remote-store call and its failure classification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

_OK_TOKEN = re.compile(r"\bok\b", re.IGNORECASE)

DUPLICATE_KEY_SIGNATURES: tuple[str, ...] = (
    "Violation of PRIMARY KEY constraint",
    "Cannot insert duplicate key",
)


def reports_ok(*texts: str) -> bool:
    """True when any text carries the word ``OK`` in any casing."""

    return any(_OK_TOKEN.search(text) for text in texts if text)


@dataclass(frozen=True, slots=True, kw_only=True)
class Outcome:
    succeeded: bool
    overall_status: str = ""
    status_message: str = ""
    request_id: str = ""
    error_codes: tuple[str, ...] = ()
    http_status: int = 200

    @classmethod
    def from_fields(
        cls,
        *,
        overall_status: str,
        status_message: str,
        request_id: str,
        error_codes: Sequence[str] = (),
        http_status: int = 200,
    ) -> Outcome:
        return cls(
            succeeded=reports_ok(overall_status, status_message),
            overall_status=overall_status,
            status_message=status_message,
            request_id=request_id,
            error_codes=tuple(error_codes),
            http_status=http_status,
        )


class FailureKind(StrEnum):
    CONFLICT = "conflict"
    OTHER = "other"


def classify_failure(
    outcome: Outcome,
    signatures: Sequence[str] = DUPLICATE_KEY_SIGNATURES,
) -> FailureKind:
    """Classify a failed insert.

    Only a status message naming a duplicate primary key counts as a conflict.
    Matching is case-insensitive substring search over ``signatures``.
    """

    if outcome.succeeded:
        raise ValueError("Cannot classify a successful outcome")
    message = outcome.status_message.lower()
    if any(signature.lower() in message for signature in signatures if signature):
        return FailureKind.CONFLICT
    return FailureKind.OTHER
