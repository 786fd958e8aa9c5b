from __future__ import annotations

import pytest

from campaignsync.domain.outcome import FailureKind, Outcome, classify_failure, reports_ok
from campaignsync.domain.reconciliation import ConflictClassifier
from tests.support.fakes import error_outcome, ok_outcome


@pytest.mark.parametrize(
    ("overall", "message", "expected"),
    [
        ("OK", "Created DataExtensionObject", True),
        ("ok", "", True),
        ("Error", "Row saved, status OK", True),
        ("Error", "Unable to save Data Extension row", False),
        ("Has Errors", "", False),
        ("", "", False),
    ],
)
def test_success_comes_from_overall_status_or_message(
    overall: str,
    message: str,
    expected: bool,
) -> None:
    outcome = Outcome.from_fields(overall_status=overall, status_message=message, request_id="r")

    assert outcome.succeeded is expected


def test_reports_ok_matches_the_word_not_substrings() -> None:
    assert reports_ok("OK")
    assert not reports_ok("Invalid token")
    assert not reports_ok("Lookup failed")


def test_duplicate_key_message_is_a_conflict() -> None:
    outcome = error_outcome(
        "Unable to save Data Extension row: Violation of PRIMARY KEY constraint 'PK_Ruleta'."
    )

    assert classify_failure(outcome) is FailureKind.CONFLICT


def test_matching_ignores_case() -> None:
    outcome = error_outcome("cannot insert DUPLICATE KEY in object 'dbo.Ruleta'")

    assert classify_failure(outcome) is FailureKind.CONFLICT


@pytest.mark.parametrize(
    "message",
    ["Login failed", "Invalid column name 'Coupon'", "Requested Data Extension not found", ""],
)
def test_other_failures_are_not_conflicts(message: str) -> None:
    assert classify_failure(error_outcome(message)) is FailureKind.OTHER


def test_classifying_a_success_is_an_error() -> None:
    with pytest.raises(ValueError, match="successful"):
        classify_failure(ok_outcome())


def test_classifier_uses_configured_signatures() -> None:
    classifier = ConflictClassifier(signatures=("ya existe",))

    assert classifier(error_outcome("El registro ya existe")) is FailureKind.CONFLICT
    assert classifier(error_outcome("Violation of PRIMARY KEY constraint")) is FailureKind.OTHER
