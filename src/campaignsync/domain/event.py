"""Campaign event records as received from the widget."""

from __future__ import annotations

import hashlib
import math
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final, Literal

from .errors import InvalidCampaignError, InvalidDiscountError, InvalidEmailError

type EventResult = Literal["won", "lost", ""]

DEFAULT_SOURCE: Final[str] = "DY_Ruleta"
DEFAULT_CAMPAIGN: Final[str] = "default"

_EMAIL_PATTERN = re.compile(
    r"""^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))"""
    r"""@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-z\-0-9]+\.)+[a-z]{2,}))$""",
    re.IGNORECASE,
)


def is_valid_email(value: str) -> bool:
    return _EMAIL_PATTERN.match(value) is not None


def hash_email(email: str) -> str:
    """Lowercase hex SHA-256 of the lower-cased address."""

    return hashlib.sha256(email.lower().encode("utf-8")).hexdigest()


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_discount(value: object) -> float | None:
    """Return the discount as a number in ``[0, 100]``; blank input means no discount."""

    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidDiscountError(f"Invalid discount: {value!r}")
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise InvalidDiscountError(f"Invalid discount: {value!r}") from exc
    elif isinstance(value, int | float):
        number = float(value)
    else:
        raise InvalidDiscountError(f"Invalid discount: {value!r}")
    if math.isnan(number) or not 0 <= number <= 100:
        raise InvalidDiscountError(f"Discount out of range: {value!r}")
    return number


def normalize_result(value: str | None) -> EventResult:
    normalized = (value or "").strip().lower()
    if normalized == "won":
        return "won"
    if normalized == "lost":
        return "lost"
    return ""


@dataclass(frozen=True, slots=True, kw_only=True)
class EventRecord:
    """One validated campaign event. Built once per inbound call and never mutated."""

    email: str
    campaign: str
    hashed_email: str
    source: str
    timestamp: str
    discount: float | None = None
    result: EventResult = ""
    variation_id: str = ""

    @classmethod
    def create(
        cls,
        *,
        email: str | None,
        campaign: str | None,
        discount: object = None,
        result: str | None = None,
        variation_id: str | None = None,
        source: str | None = None,
        occurred_at: datetime | None = None,
    ) -> EventRecord:
        address = (email or "").strip()
        if not address or not is_valid_email(address):
            raise InvalidEmailError(f"Invalid email: {email!r}")
        campaign_name = (campaign or "").strip()
        if not campaign_name:
            raise InvalidCampaignError("Campaign is required")
        return cls(
            email=address,
            campaign=campaign_name,
            hashed_email=hash_email(address),
            source=(source or "").strip() or DEFAULT_SOURCE,
            timestamp=format_timestamp(occurred_at or datetime.now(UTC)),
            discount=parse_discount(discount),
            result=normalize_result(result),
            variation_id=(variation_id or "").strip(),
        )

    @property
    def is_winner(self) -> bool:
        return self.result == "won"
