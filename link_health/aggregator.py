"""link_health.aggregator: сводка результатов обхода."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from link_health.crawler.models import LinkRecord


@dataclass(slots=True)
class CrawlSummary:
    """Все записи LinkRecord одного обхода в порядке завершения запросов."""

    seed_url: str
    records: List[LinkRecord] = field(default_factory=list)
    duration: float = 0.0
    stopped: bool = False

    def add(self, record: LinkRecord) -> None:
        self.records.append(record)

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def healthy(self) -> int:
        return sum(1 for r in self.records if r.healthy)

    @property
    def down(self) -> int:
        return self.total - self.healthy

    def broken(self) -> List[LinkRecord]:
        """Возвращает только нерабочие ссылки."""
        return [r for r in self.records if not r.healthy]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "seed_url": self.seed_url,
            "total": self.total,
            "healthy": self.healthy,
            "down": self.down,
            "duration": round(self.duration, 3),
            "stopped": self.stopped,
            "records": [asdict(r) for r in self.records],
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление сводки."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)
