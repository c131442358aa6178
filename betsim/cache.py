# -*- coding: utf-8 -*-

"""
Caching of computed simulation results.

Callers inject a cache; nothing here keeps module-level state. Keys combine
the dataset identifier with a fingerprint of the full parameter set, so any
parameter change (season start included) produces a different key.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from betsim.params import SimulationParameters, params_from_mapping
from betsim.simulate import RecordLike, SimulationRow, simulate
from betsim.stats import AggregateStatistics, summarize

logger = logging.getLogger(__name__)

# bump when simulation logic changes
CACHE_VERSION = "v5"


@dataclass(frozen=True)
class SimulationResult:
    dataset_id: str
    params: SimulationParameters
    rows: List[SimulationRow] = field(default_factory=list)
    statistics: Optional[AggregateStatistics] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "datasetId": self.dataset_id,
            "params": self.params.to_dict(),
            "rows": [row.to_dict() for row in self.rows],
            "statistics": self.statistics.to_dict() if self.statistics else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationResult":
        stats = data.get("statistics")
        return cls(
            dataset_id=str(data["datasetId"]),
            params=params_from_mapping(dict(data.get("params") or {})),
            rows=[SimulationRow.from_dict(row) for row in data.get("rows") or []],
            statistics=AggregateStatistics.from_dict(stats) if stats else None,
        )


def cache_key(dataset_id: str, params: SimulationParameters) -> str:
    return f"{CACHE_VERSION}-{dataset_id}-{params.fingerprint()}"


class ResultCache:
    def get(self, key: str) -> Optional[SimulationResult]:
        raise NotImplementedError

    def put(self, key: str, result: SimulationResult) -> None:
        raise NotImplementedError


class MemoryCache(ResultCache):
    def __init__(self) -> None:
        self._entries: Dict[str, SimulationResult] = {}

    def get(self, key: str) -> Optional[SimulationResult]:
        return self._entries.get(key)

    def put(self, key: str, result: SimulationResult) -> None:
        self._entries[key] = result

    def __len__(self) -> int:
        return len(self._entries)


class JsonFileCache(ResultCache):
    """One JSON file per key under ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.\-]", "_", key)
        return self.directory / f"{safe}.json"

    def get(self, key: str) -> Optional[SimulationResult]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return SimulationResult.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable cache entry %s: %s", path, exc)
            return None

    def put(self, key: str, result: SimulationResult) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)


def compute_result(
    dataset_id: str, records: Iterable[RecordLike], params: SimulationParameters
) -> SimulationResult:
    rows = simulate(records, params)
    return SimulationResult(
        dataset_id=dataset_id,
        params=params,
        rows=rows,
        statistics=summarize(rows, params.starting_bankroll),
    )


def run_cached(
    dataset_id: str,
    records: Iterable[RecordLike],
    params: SimulationParameters,
    cache: Optional[ResultCache] = None,
) -> SimulationResult:
    if cache is None:
        return compute_result(dataset_id, records, params)
    key = cache_key(dataset_id, params)
    cached = cache.get(key)
    if cached is not None:
        logger.info("Using cached simulation for %s (%s)", dataset_id, key)
        return cached
    logger.info("Simulating %s (%s)", dataset_id, key)
    result = compute_result(dataset_id, records, params)
    cache.put(key, result)
    return result
