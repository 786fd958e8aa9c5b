"""Upsert reconciliation of one event into the remote data extension.

The remote store distinguishes inserts from updates and rejects an insert whose key
already exists. A reconciliation therefore runs a small state machine:

    IDLE -> INSERTING -> DONE
                      -> CONFLICT -> UPDATING -> DONE

Only a failure classified as a key conflict leads from INSERTING to the update path.
Every other failure ends the run with :class:`RemoteLogicalFailure`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import RemoteLogicalFailure
from .outcome import DUPLICATE_KEY_SIGNATURES, FailureKind, classify_failure
from .projection import UpdatePlan, plan_update, project

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .event import EventRecord
    from .fields import FieldName, FieldSchema
    from .outcome import Outcome
    from .ports import Credential, CredentialProvider, RemoteStore

log = getLogger(__name__)


class ReconcileState(StrEnum):
    IDLE = "idle"
    INSERTING = "inserting"
    CONFLICT = "conflict"
    UPDATING = "updating"
    DONE = "done"


class ReconcileAction(StrEnum):
    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    action: ReconcileAction
    saved: Mapping[FieldName, str]
    outcome: Outcome | None = None
    states: tuple[ReconcileState, ...] = ()


@dataclass(frozen=True, slots=True)
class ConflictClassifier:
    """Callable wrapper so the duplicate-key signatures can come from configuration."""

    signatures: tuple[str, ...] = DUPLICATE_KEY_SIGNATURES

    def __call__(self, outcome: Outcome) -> FailureKind:
        return classify_failure(outcome, self.signatures)


@dataclass(slots=True)
class _Run:
    states: list[ReconcileState] = field(default_factory=lambda: [ReconcileState.IDLE])

    def enter(self, state: ReconcileState) -> None:
        log.debug("Reconcile transition %s -> %s", self.states[-1], state)
        self.states.append(state)

    def finish(
        self,
        action: ReconcileAction,
        saved: Mapping[FieldName, str],
        outcome: Outcome | None,
    ) -> ReconcileResult:
        self.enter(ReconcileState.DONE)
        return ReconcileResult(
            action=action,
            saved=dict(saved),
            outcome=outcome,
            states=tuple(self.states),
        )


@dataclass(slots=True)
class UpsertReconciler:
    credentials: CredentialProvider
    store: RemoteStore
    schema: FieldSchema
    classify: Callable[[Outcome], FailureKind] = field(default_factory=ConflictClassifier)
    winners_only: bool = False

    def reconcile(self, record: EventRecord, *, update_only: bool = False) -> ReconcileResult:
        """Insert ``record`` or, when its key already exists, update the existing row.

        ``update_only`` skips the insert attempt. Input problems surface as
        :class:`InvalidInputError` subclasses before any network call.
        """

        run = _Run()
        if self.winners_only and not record.is_winner:
            log.info("Skipping non-winning event for campaign %s", record.campaign)
            return run.finish(ReconcileAction.SKIPPED, {}, None)

        projection = project(record, self.schema)

        if update_only:
            plan = plan_update(projection, timestamp=record.timestamp)
            credential = self.credentials.acquire()
            run.enter(ReconcileState.UPDATING)
            return self._update(run, credential, plan)

        credential = self.credentials.acquire()
        run.enter(ReconcileState.INSERTING)
        outcome = self.store.insert(credential, projection.values)
        if outcome.succeeded:
            log.info(
                "Inserted row for campaign %s (request %s)", record.campaign, outcome.request_id
            )
            return run.finish(ReconcileAction.INSERTED, projection.values, outcome)

        if self.classify(outcome) is not FailureKind.CONFLICT:
            log.error(
                "Insert rejected: status=%s message=%r request=%s codes=%s",
                outcome.overall_status,
                outcome.status_message,
                outcome.request_id,
                ",".join(outcome.error_codes),
            )
            raise RemoteLogicalFailure(outcome, stage="insert")

        run.enter(ReconcileState.CONFLICT)
        log.info("Row exists for campaign %s, falling back to update", record.campaign)
        plan = plan_update(projection, timestamp=record.timestamp)
        run.enter(ReconcileState.UPDATING)
        return self._update(run, credential, plan)

    def _update(self, run: _Run, credential: Credential, plan: UpdatePlan) -> ReconcileResult:
        if plan.timestamp_only:
            log.info("Nothing to set besides the keys, touching %s only", *plan.properties)
        outcome = self.store.update(credential, plan.keys, plan.properties)
        if not outcome.succeeded:
            log.error(
                "Update rejected: status=%s message=%r request=%s codes=%s",
                outcome.overall_status,
                outcome.status_message,
                outcome.request_id,
                ",".join(outcome.error_codes),
            )
            raise RemoteLogicalFailure(outcome, stage="update")
        log.info("Updated existing row (request %s)", outcome.request_id)
        return run.finish(ReconcileAction.UPDATED, {**plan.keys, **plan.properties}, outcome)

