"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from campaignsync.adapters.http_resilience import BlockingSession
from campaignsync.adapters.marketing_cloud import DataExtensionClient, MarketingCloudAuth
from campaignsync.config import ConfigurationError, IntegrationConfig, get_integration_config
from campaignsync.domain.errors import ReconciliationError, RemoteLogicalFailure
from campaignsync.domain.event import EventRecord
from campaignsync.domain.reconciliation import (
    ConflictClassifier,
    ReconcileAction,
    ReconcileResult,
    UpsertReconciler,
)

if TYPE_CHECKING:
    from datetime import datetime

type ResponseBody = dict[str, object]

log = getLogger(__name__)


def build_reconciler(config: IntegrationConfig, session: BlockingSession) -> UpsertReconciler:
    """Wire the Marketing Cloud adapters into a reconciler.

    Token and SOAP calls share ``session``, and with it the configured rate limit.
    """

    return UpsertReconciler(
        credentials=MarketingCloudAuth(config=config.auth, session=session),
        store=DataExtensionClient(config=config, session=session),
        schema=config.schema,
        classify=ConflictClassifier(signatures=config.conflict_signatures),
        winners_only=config.winners_only,
    )


def submit_event(
    *,
    email: str | None,
    campaign: str | None,
    discount: object = None,
    result: str | None = None,
    variation_id: str | None = None,
    source: str | None = None,
    occurred_at: datetime | None = None,
    update_only: bool = False,
    config: IntegrationConfig | None = None,
    reconciler: UpsertReconciler | None = None,
) -> ReconcileResult:
    """Validate one campaign event and reconcile it into the data extension."""

    effective_config = config or get_integration_config()
    record = EventRecord.create(
        email=email,
        campaign=campaign,
        discount=discount,
        result=result,
        variation_id=variation_id,
        source=source or effective_config.event_source,
        occurred_at=occurred_at,
    )
    if reconciler is None:
        with BlockingSession(effective_config.resilience) as session:
            return _reconcile(build_reconciler(effective_config, session), record, update_only)
    return _reconcile(reconciler, record, update_only)


def _reconcile(
    reconciler: UpsertReconciler,
    record: EventRecord,
    update_only: bool,
) -> ReconcileResult:
    log.info(
        "Reconciling event: campaign=%s, result=%s, discount=%s, update_only=%s",
        record.campaign,
        record.result or "-",
        record.discount,
        update_only,
    )
    reconciled = reconciler.reconcile(record, update_only=update_only)
    path = " -> ".join(reconciled.states)
    log.info(f"Finished reconciliation: action={reconciled.action}, path={path}")
    return reconciled


def render_result(result: ReconcileResult, config: IntegrationConfig) -> ResponseBody:
    body: ResponseBody = {
        "ok": True,
        "action": str(result.action),
        "saved": config.schema.columns(result.saved),
    }
    if result.action is ReconcileAction.SKIPPED or result.outcome is None:
        return body
    outcome = result.outcome
    body["soap"] = {
        "status": outcome.http_status,
        "requestId": outcome.request_id,
        "overall": outcome.overall_status,
        "statusMessage": outcome.status_message,
        "errorCodes": list(outcome.error_codes),
    }
    return body


def render_error(error: ReconciliationError | ConfigurationError) -> tuple[int, ResponseBody]:
    body: ResponseBody = {"ok": False, "error": error.code, "detail": str(error)}
    if isinstance(error, RemoteLogicalFailure):
        body["stage"] = error.stage
        body["requestId"] = error.outcome.request_id
        body["errorCodes"] = list(error.outcome.error_codes)
    return error.status_code, body


def handle_event(
    *,
    email: str | None,
    campaign: str | None,
    discount: object = None,
    result: str | None = None,
    variation_id: str | None = None,
    source: str | None = None,
    update_only: bool = False,
    config: IntegrationConfig | None = None,
    reconciler: UpsertReconciler | None = None,
) -> tuple[int, ResponseBody]:
    """Reconcile an event and return ``(status_code, response_body)`` for the caller."""

    try:
        effective_config = config or get_integration_config()
        reconciled = submit_event(
            email=email,
            campaign=campaign,
            discount=discount,
            result=result,
            variation_id=variation_id,
            source=source,
            update_only=update_only,
            config=effective_config,
            reconciler=reconciler,
        )
    except (ReconciliationError, ConfigurationError) as exc:
        log.warning("Event rejected: %s (%s)", exc.code, exc)
        return render_error(exc)
    return 200, render_result(reconciled, effective_config)
