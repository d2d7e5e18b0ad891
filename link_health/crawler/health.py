# link_health/crawler/health.py
"""Health classification of fetch outcomes."""
from __future__ import annotations

from link_health.crawler.models import FetchOutcome, LinkRecord

HEALTHY_MIN_STATUS = 200
HEALTHY_MAX_STATUS = 299


def classify(outcome: FetchOutcome) -> bool:
    """Healthy means no transport error and a 2xx status."""
    if outcome.error is not None or outcome.status is None:
        return False
    return HEALTHY_MIN_STATUS <= outcome.status <= HEALTHY_MAX_STATUS


def to_record(outcome: FetchOutcome) -> LinkRecord:
    return LinkRecord(url=outcome.url, status=outcome.status, healthy=classify(outcome))
