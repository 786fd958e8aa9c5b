"""Error taxonomy surfaced by a reconciliation."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .fields import FieldName
    from .outcome import Outcome


class ReconciliationError(RuntimeError):
    """Base class for failures reported back to the caller.

    ``code`` is the stable identifier placed in the response document and
    ``status_code`` the HTTP status a front door should answer with.
    """

    code: ClassVar[str] = "reconciliation_error"
    status_code: ClassVar[int] = 500


class InvalidInputError(ReconciliationError):
    """The event cannot be reconciled as given. Raised before any network call."""

    code = "invalid_input"
    status_code = 400


class InvalidEmailError(InvalidInputError):
    code = "invalid_email"


class InvalidDiscountError(InvalidInputError):
    code = "invalid_discount"


class InvalidCampaignError(InvalidInputError):
    code = "invalid_campaign"


class MissingKeyFieldError(InvalidInputError):
    """A key field is missing from the projection or projected as an empty value."""

    code = "missing_key_field"

    def __init__(self, field: FieldName) -> None:
        super().__init__(f"Key field {field} has no value")
        self.field = field


class NoUpdatableFieldsError(InvalidInputError):
    """An update would carry no settable property and no timestamp field is available."""

    code = "no_updatable_fields"


class AuthError(ReconciliationError):
    """The token endpoint did not issue a bearer token."""

    code = "auth_error"
    status_code = 502

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class TransportError(ReconciliationError):
    """The remote endpoint answered with a non-success status or could not be reached."""

    code = "transport_error"
    status_code = 502

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class RemoteLogicalFailure(ReconciliationError):
    """The remote store accepted the call but reported a failure in its envelope."""

    code = "remote_failure"
    status_code = 502

    def __init__(self, outcome: Outcome, *, stage: str) -> None:
        message = outcome.status_message or outcome.overall_status or "unknown failure"
        super().__init__(f"{stage} failed: {message}")
        self.outcome = outcome
        self.stage = stage
