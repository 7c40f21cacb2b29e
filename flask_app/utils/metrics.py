"""Prometheus metrics for the contact services."""

from __future__ import annotations

from typing import Literal

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

_bulk_update_outcomes = Counter(
    "contacts_bulk_update_outcomes_total",
    "Per-contact outcomes of bulk field updates.",
    ["field", "outcome"],
)
_bulk_update_duration = Histogram(
    "contacts_bulk_update_duration_seconds",
    "Duration of a bulk update request in seconds.",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)
_campaign_tasks_created = Counter(
    "campaign_tasks_created_total",
    "Tasks created by campaign distribution.",
)
_campaign_contacts_distributed = Counter(
    "campaign_contacts_distributed_total",
    "Contacts handed to staff members by campaign distribution.",
)
_check_in_outcomes = Counter(
    "attendance_check_in_outcomes_total",
    "Attendance check-in attempts by outcome.",
    ["outcome"],
)


def record_bulk_update(*, field: str, succeeded: int, failures: dict[str, int], duration_seconds: float) -> None:
    """Capture metrics for one bulk update request."""

    if succeeded:
        _bulk_update_outcomes.labels(field=field, outcome="succeeded").inc(succeeded)
    for kind, count in failures.items():
        _bulk_update_outcomes.labels(field=field, outcome=kind).inc(count)
    _bulk_update_duration.observe(duration_seconds)


def record_campaign(*, tasks_created: int, contacts_distributed: int) -> None:
    _campaign_tasks_created.inc(tasks_created)
    _campaign_contacts_distributed.inc(contacts_distributed)


def record_check_in(
    outcome: Literal["recorded", "already_recorded", "not_found", "rejected", "error"],
) -> None:
    _check_in_outcomes.labels(outcome=outcome).inc()


def render_latest() -> tuple[bytes, str]:
    """Serialized registry plus its content type, for the metrics endpoint."""

    return generate_latest(), CONTENT_TYPE_LATEST
