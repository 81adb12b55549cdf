"""Performance metrics computed from incident documents.

Metrics are derived on request rather than stored:

- ``response_time``: mean minutes from report to resolution
- ``completion_rate``: percent of incidents resolved or closed
- ``incident_count``: incidents reported in the window
"""

import logging
from datetime import datetime, timedelta
from statistics import mean
from typing import Any

from pydantic import Field

from crisiscommand.core.models import ApiModel, new_id, utcnow
from crisiscommand.incidents.models import COMPLETED_STATUSES, Incident
from crisiscommand.incidents.store import IncidentStore

logger = logging.getLogger(__name__)

TIMEFRAMES: dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_TIMEFRAME = "24h"
ALL_SERVICES = "all"


class PerformanceMetric(ApiModel):
    """One computed metric over a time window."""

    id: str = Field(default_factory=new_id)
    service_id: str
    metric_type: str  # response_time, completion_rate, incident_count
    value: float
    period: str
    start_time: datetime
    end_time: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)


def compute_metrics(
    incidents: list[Incident],
    *,
    service_id: str,
    period: str,
    start: datetime,
    end: datetime,
) -> list[PerformanceMetric]:
    """Compute the metric set for incidents reported within [start, end]."""
    window = [i for i in incidents if start <= i.created_at <= end]
    response_times = [i.actual_response_time for i in window if i.actual_response_time is not None]
    completed = sum(1 for i in window if i.status in COMPLETED_STATUSES)

    def metric(metric_type: str, value: float, **metadata: Any) -> PerformanceMetric:
        return PerformanceMetric(
            service_id=service_id,
            metric_type=metric_type,
            value=value,
            period=period,
            start_time=start,
            end_time=end,
            metadata=metadata,
        )

    return [
        metric(
            "response_time",
            round(mean(response_times), 1) if response_times else 0.0,
            sample_size=len(response_times),
        ),
        metric(
            "completion_rate",
            round(100 * completed / len(window), 1) if window else 0.0,
            completed=completed,
        ),
        metric("incident_count", float(len(window))),
    ]


async def performance_metrics(
    timeframe: str = DEFAULT_TIMEFRAME,
    service_id: str | None = None,
) -> dict:
    """Compute metrics for the trailing ``timeframe``.

    Args:
        timeframe: One of "1h", "24h", "7d", "30d"
        service_id: Restrict to one service (default: all services)

    Returns:
        ``{"metrics": [...]}``, or an error for an unknown timeframe
    """
    span = TIMEFRAMES.get(timeframe)
    if span is None:
        return {"error": f"Unknown timeframe: {timeframe} (use one of {', '.join(TIMEFRAMES)})"}

    end = utcnow()
    start = end - span

    async with IncidentStore() as store:
        if service_id:
            incidents = await store.list_by_service(service_id)
        else:
            incidents = await store.list_all()

    metrics = compute_metrics(
        incidents,
        service_id=service_id or ALL_SERVICES,
        period=timeframe,
        start=start,
        end=end,
    )
    logger.debug("Computed %d metrics over %d incidents", len(metrics), len(incidents))
    return {"metrics": [m.to_api() for m in metrics]}
