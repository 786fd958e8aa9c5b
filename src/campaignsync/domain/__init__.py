"""Domain core: event records, field projection and upsert reconciliation."""

from __future__ import annotations

from .errors import (
    AuthError,
    InvalidCampaignError,
    InvalidDiscountError,
    InvalidEmailError,
    InvalidInputError,
    MissingKeyFieldError,
    NoUpdatableFieldsError,
    ReconciliationError,
    RemoteLogicalFailure,
    TransportError,
)
from .event import EventRecord
from .fields import FieldName, FieldPolicy, FieldSchema, FieldSchemaError
from .outcome import FailureKind, Outcome, classify_failure
from .ports import Credential, CredentialProvider, RemoteStore
from .projection import Projection, UpdatePlan, plan_update, project
from .reconciliation import (
    ConflictClassifier,
    ReconcileAction,
    ReconcileResult,
    ReconcileState,
    UpsertReconciler,
)

__all__ = [
    "AuthError",
    "ConflictClassifier",
    "Credential",
    "CredentialProvider",
    "EventRecord",
    "FailureKind",
    "FieldName",
    "FieldPolicy",
    "FieldSchema",
    "FieldSchemaError",
    "InvalidCampaignError",
    "InvalidDiscountError",
    "InvalidEmailError",
    "InvalidInputError",
    "MissingKeyFieldError",
    "NoUpdatableFieldsError",
    "Outcome",
    "Projection",
    "ReconcileAction",
    "ReconcileResult",
    "ReconcileState",
    "ReconciliationError",
    "RemoteLogicalFailure",
    "RemoteStore",
    "TransportError",
    "UpdatePlan",
    "UpsertReconciler",
    "classify_failure",
    "plan_update",
    "project",
]
