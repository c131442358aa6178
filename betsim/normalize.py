# -*- coding: utf-8 -*-

"""
Resolve canonical game fields from heterogeneous prediction rows.

Datasets from different seasons spell their columns differently
("Home ML", "home_ml", "teamOne_ml", ...). Every canonical field is looked up
through an ordered alias list; the first alias present on the row wins.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence


HOME_MARKERS = {"home", "h", "1"}
AWAY_MARKERS = {"away", "a", "2"}
UNKNOWN_WINNER = "unknown"

DEFAULT_ALIASES: Dict[str, List[str]] = {
    "date": ["Game Date", "date", "game_date", "gameDate"],
    "home": ["Home Team", "home", "home_team", "homeTeam", "teamOne", "home_name"],
    "away": [
        "Visitor Team",
        "away",
        "away_team",
        "visitor",
        "visitor_team",
        "awayTeam",
        "teamTwo",
        "away_name",
    ],
    "prediction": ["Prediction", "prediction", "pick", "predicted_winner", "model_pick"],
    "strength": [
        "Prediction Strength",
        "prediction_strength",
        "edge",
        "confidence",
        "model_confidence",
        "predictionStrength",
    ],
    "winner": ["Winner", "winner", "winning_team", "winnerTeam"],
    "correctness": ["predictionCorrectness"],
    "home_odds": [
        "Home ML",
        "home_ml",
        "homeMoneyline",
        "teamOne_ml",
        "home_odds",
        "homeMoneyLine",
        "homeML",
    ],
    "away_odds": [
        "Away ML",
        "away_ml",
        "awayMoneyline",
        "visitor_ml",
        "teamTwo_ml",
        "away_odds",
        "awayMoneyLine",
        "awayML",
    ],
    "predicted_odds": ["Pred ML", "pred_ml", "model_ml", "model_moneyline", "decimal_odds", "ml", "moneyline"],
    "matchup": ["Matchup", "matchup", "game", "teams"],
}
DEFAULT_ALIASES["money_line"] = [
    "Money Line",
    "ml",
    "moneyline",
    "best_ml",
    "consensus_ml",
    *DEFAULT_ALIASES["home_odds"],
    *DEFAULT_ALIASES["away_odds"],
]


@dataclass(frozen=True)
class PredictionRecord:
    date: str
    home_team: str
    away_team: str
    prediction: str
    prediction_strength: Optional[float]
    home_odds: Optional[float]
    away_odds: Optional[float]
    predicted_odds: Optional[float]
    actual_winner: str
    is_correct: Optional[bool]
    matchup: str
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


def compact_key(value: Any) -> str:
    if value is None:
        return ""
    return re.sub(r"[\s_\-]", "", str(value).lower())


def safe_float(val: Any) -> Optional[float]:
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        num = float(val)
    else:
        s = str(val).strip()
        if s == "":
            return None
        try:
            num = float(s)
        except ValueError:
            return None
    if not math.isfinite(num):
        return None
    return num


def clean_text(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, float) and math.isnan(val):
        return ""
    return str(val).strip()


def _aliases_for(name: str, aliases: Optional[Mapping[str, Sequence[str]]]) -> Sequence[str]:
    table = aliases if aliases is not None else DEFAULT_ALIASES
    return table.get(name, ())


def resolve_key(row: Mapping[str, Any], aliases: Sequence[str]) -> Optional[str]:
    """Return the row key matching the first alias, or None."""
    by_compact: Dict[str, str] = {}
    for key in row.keys():
        by_compact.setdefault(compact_key(key), key)
    for alias in aliases:
        if alias in row:
            return alias
        key = by_compact.get(compact_key(alias))
        if key is not None:
            return key
    return None


def field_value(row: Mapping[str, Any], aliases: Sequence[str], default: Any = None) -> Any:
    key = resolve_key(row, aliases)
    return row[key] if key is not None else default


def resolve_date(row: Mapping[str, Any], aliases: Optional[Mapping[str, Sequence[str]]] = None) -> str:
    return clean_text(field_value(row, _aliases_for("date", aliases), ""))[:10]


def resolve_strength(
    row: Mapping[str, Any], aliases: Optional[Mapping[str, Sequence[str]]] = None
) -> Optional[float]:
    return safe_float(field_value(row, _aliases_for("strength", aliases)))


def _decimal_odds(val: Any) -> Optional[float]:
    # decimal odds at or below 1.0 count as missing
    odds = safe_float(val)
    if odds is None or odds <= 1.0:
        return None
    return odds


def resolve_predicted_odds(
    row: Mapping[str, Any], aliases: Optional[Mapping[str, Sequence[str]]] = None
) -> Optional[float]:
    """
    Decimal odds of the side the model picked.

    Falls back to an explicit predicted-odds column, then to whichever side's
    odds are closer to even when the pick cannot be mapped to a side.
    """
    pred = compact_key(clean_text(field_value(row, _aliases_for("prediction", aliases), "")))
    home = compact_key(clean_text(field_value(row, _aliases_for("home", aliases), "")))
    away = compact_key(clean_text(field_value(row, _aliases_for("away", aliases), "")))
    home_odds = _decimal_odds(field_value(row, _aliases_for("home_odds", aliases)))
    away_odds = _decimal_odds(field_value(row, _aliases_for("away_odds", aliases)))

    if pred:
        if (home and pred == home) or pred in HOME_MARKERS:
            if home_odds is not None:
                return home_odds
        if (away and pred == away) or pred in AWAY_MARKERS:
            if away_odds is not None:
                return away_odds

    explicit = _decimal_odds(field_value(row, _aliases_for("predicted_odds", aliases)))
    if explicit is not None:
        return explicit
    if home_odds is not None and away_odds is not None:
        return home_odds if abs(home_odds) <= abs(away_odds) else away_odds
    return None


def resolve_correctness(
    row: Mapping[str, Any], aliases: Optional[Mapping[str, Sequence[str]]] = None
) -> Optional[bool]:
    """True / False when the outcome is known, None when it is not."""
    key = resolve_key(row, _aliases_for("correctness", aliases))
    if key is not None:
        code = safe_float(row[key])
        if code is not None:
            if code == 1:
                return True
            if code == 0:
                return False
            return None

    pred = compact_key(clean_text(field_value(row, _aliases_for("prediction", aliases), "")))
    winner = compact_key(clean_text(field_value(row, _aliases_for("winner", aliases), "")))
    if not pred or not winner or winner == UNKNOWN_WINNER:
        return None
    return pred == winner


def resolve_matchup(row: Mapping[str, Any], aliases: Optional[Mapping[str, Sequence[str]]] = None) -> str:
    explicit = clean_text(field_value(row, _aliases_for("matchup", aliases), ""))
    if explicit:
        return explicit
    home = clean_text(field_value(row, _aliases_for("home", aliases), ""))
    away = clean_text(field_value(row, _aliases_for("away", aliases), ""))
    if home or away:
        return f"{away or 'Away'} @ {home or 'Home'}"
    return ""


def normalize_record(
    row: Mapping[str, Any], aliases: Optional[Mapping[str, Sequence[str]]] = None
) -> PredictionRecord:
    return PredictionRecord(
        date=resolve_date(row, aliases),
        home_team=clean_text(field_value(row, _aliases_for("home", aliases), "")),
        away_team=clean_text(field_value(row, _aliases_for("away", aliases), "")),
        prediction=clean_text(field_value(row, _aliases_for("prediction", aliases), "")),
        prediction_strength=resolve_strength(row, aliases),
        home_odds=safe_float(field_value(row, _aliases_for("home_odds", aliases))),
        away_odds=safe_float(field_value(row, _aliases_for("away_odds", aliases))),
        predicted_odds=resolve_predicted_odds(row, aliases),
        actual_winner=clean_text(field_value(row, _aliases_for("winner", aliases), "")),
        is_correct=resolve_correctness(row, aliases),
        matchup=resolve_matchup(row, aliases),
        raw=dict(row),
    )
