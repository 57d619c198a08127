"""
Metrics Endpoints

Snapshot of request counters and durations.
"""

from fastapi import APIRouter, Depends, Request

from objects_api.services.metrics import MetricsCollector


router = APIRouter()


def get_metrics_collector(request: Request) -> MetricsCollector:
    """Collector the request middleware reports to"""
    return request.app.state.metrics


@router.get("", summary="Request metrics")
async def read_metrics(metrics: MetricsCollector = Depends(get_metrics_collector)) -> dict:
    """Totals, failures and average duration per action since start-up."""
    return metrics.snapshot()
