# -*- coding: utf-8 -*-

"""
Dataset files: prediction history and today's recommendations.

JSON payloads come either as a bare array of rows, a ``{"rows": [...]}``
wrapper, or a ``{"tables": {...}}`` wrapper keyed by table name. CSV exports
are read with pandas.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from betsim.normalize import (
    DEFAULT_ALIASES,
    clean_text,
    field_value,
    resolve_date,
    resolve_matchup,
    resolve_strength,
    safe_float,
)

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

PREFERRED_MAIN_TABLES = [
    "PredictionsHistory",
    "Main",
    "History",
    "Games",
    "Performance",
    "performance",
]
PREFERRED_TODAY_TABLES = ["TodayRecommendations", "Today", "DayOf", "Predictions", "day_of_predictions"]


@dataclass(frozen=True)
class DatasetSource:
    key: str
    label: str
    main_file: str
    season_start: str
    today_file: Optional[str] = None

    @property
    def is_archive(self) -> bool:
        return self.today_file is None


DATASETS: Dict[str, DatasetSource] = {
    "live": DatasetSource("live", "Live (Current)", "database.json", "2025-11-21", today_file="dayOf.json"),
    "2024": DatasetSource("2024", "2024 Database", "2024Database.json", "2024-11-22"),
    "2023": DatasetSource("2023", "2023 Database", "2023Database.json", "2023-11-24"),
}
SEASON_STARTS: Dict[str, str] = {key: source_info.season_start for key, source_info in DATASETS.items()}


@dataclass(frozen=True)
class FavouriteRow:
    date: str
    matchup: str
    home_team: str
    away_team: str
    prediction: str
    prediction_strength: Optional[float]
    money_line: Optional[float]

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date,
            "matchup": self.matchup,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "prediction": self.prediction,
            "predictionStrength": self.prediction_strength,
            "moneyLine": self.money_line,
        }


def resolve_dataset(key: str) -> DatasetSource:
    source_info = DATASETS.get(key)
    if source_info is None:
        raise ValueError(f"Unknown dataset {key!r}; expected one of: {', '.join(DATASETS)}")
    return source_info


def pick_rows(payload: Any, preferred: Sequence[str]) -> List[Row]:
    if isinstance(payload, list):
        return [row for row in payload if isinstance(row, dict)]
    if not isinstance(payload, dict):
        return []
    if isinstance(payload.get("rows"), list):
        return [row for row in payload["rows"] if isinstance(row, dict)]
    tables = payload.get("tables")
    if isinstance(tables, dict):
        for name in preferred:
            rows = tables.get(name)
            if isinstance(rows, list) and rows:
                return [row for row in rows if isinstance(row, dict)]
        for rows in tables.values():
            if isinstance(rows, list) and rows:
                return [row for row in rows if isinstance(row, dict)]
    return []


def _read_csv_rows(path: Path) -> List[Row]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(col).strip() for col in df.columns]
    rows = df.to_dict(orient="records")
    return [{k: (v if v != "" else None) for k, v in row.items()} for row in rows]


def load_rows(path: Path, preferred: Sequence[str] = PREFERRED_MAIN_TABLES) -> List[Row]:
    if not path.exists():
        raise FileNotFoundError(f"Dataset file missing: {path}")
    if path.suffix.lower() == ".csv":
        rows = _read_csv_rows(path)
    else:
        with path.open("r", encoding="utf-8") as f:
            rows = pick_rows(json.load(f), preferred)
    logger.debug("Loaded %d rows from %s", len(rows), path)
    return rows


def normalize_favourite(
    row: Mapping[str, Any], aliases: Optional[Mapping[str, Sequence[str]]] = None
) -> FavouriteRow:
    table = aliases if aliases is not None else DEFAULT_ALIASES
    return FavouriteRow(
        date=resolve_date(row, table),
        matchup=resolve_matchup(row, table),
        home_team=clean_text(field_value(row, table["home"], "")),
        away_team=clean_text(field_value(row, table["away"], "")),
        prediction=clean_text(field_value(row, table["prediction"], "")),
        prediction_strength=resolve_strength(row, table),
        money_line=safe_float(field_value(row, table["money_line"])),
    )


def load_favourites(path: Optional[Path]) -> List[FavouriteRow]:
    """Today's recommendations; a missing file means none."""
    if path is None or not path.exists():
        return []
    return [normalize_favourite(row) for row in load_rows(path, PREFERRED_TODAY_TABLES)]
