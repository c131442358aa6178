# -*- coding: utf-8 -*-

"""
Simulation parameters and the params-file loader.

A params file is either a JSON object or a plain text file of
``key: value`` / ``key = value`` lines. Keys are normalized, so
"Initial Bankroll", "initial-bankroll" and "initial_bankroll" are equivalent.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import math
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional


DATE_FMT = "%Y-%m-%d"

INITIAL_BANKROLL = 3000.0
PRED_STRENGTH_THRESHOLD = 70.0
MAX_PREDICTION_ODDS = 2.0
REINVESTMENT_THRESHOLD = 0.0
RESET_BANKROLL_AMOUNT = 500.0
DAILY_STAKE_PERCENT = 40.0

PARAM_ALIASES: Dict[str, tuple] = {
    "starting_bankroll": ("starting_bankroll", "initial_bankroll", "bankroll"),
    "strength_threshold": (
        "strength_threshold",
        "pred_strength_threshold",
        "prediction_strength_threshold",
        "min_strength",
    ),
    "max_odds": ("max_odds", "max_prediction_ml", "max_pred_ml", "odds_max"),
    "daily_stake_percent": ("daily_stake_percent", "daily_invest_percent", "stake_percent"),
    "season_start_date": ("season_start_date", "season_start", "start_date"),
    "reinvestment_threshold": ("reinvestment_threshold", "reinvest_threshold"),
    "reset_bankroll_amount": ("reset_bankroll_amount", "reset_bankroll", "reset_amount"),
}
DISABLED_VALUES = {"none", "null", "off", "disabled"}
_NUMERIC_FIELDS = (
    "starting_bankroll",
    "strength_threshold",
    "max_odds",
    "daily_stake_percent",
    "reinvestment_threshold",
    "reset_bankroll_amount",
)
_OPTIONAL_FIELDS = {"max_odds", "reset_bankroll_amount"}


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass(frozen=True)
class SimulationParameters:
    starting_bankroll: float = INITIAL_BANKROLL
    strength_threshold: float = PRED_STRENGTH_THRESHOLD
    max_odds: Optional[float] = MAX_PREDICTION_ODDS
    daily_stake_percent: float = DAILY_STAKE_PERCENT
    season_start_date: Optional[str] = None
    reinvestment_threshold: float = REINVESTMENT_THRESHOLD
    reset_bankroll_amount: Optional[float] = RESET_BANKROLL_AMOUNT

    def __post_init__(self) -> None:
        for name in _NUMERIC_FIELDS:
            value = getattr(self, name)
            if value is None and name in _OPTIONAL_FIELDS:
                continue
            if not _is_finite_number(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}.")
        if self.starting_bankroll <= 0:
            raise ValueError(f"starting_bankroll must be positive, got {self.starting_bankroll!r}.")
        if not 0 <= self.daily_stake_percent <= 100:
            raise ValueError(
                f"daily_stake_percent must be between 0 and 100, got {self.daily_stake_percent!r}."
            )
        if self.max_odds is not None and self.max_odds <= 1.0:
            raise ValueError(f"max_odds must be greater than 1.0 (decimal odds), got {self.max_odds!r}.")
        if self.reinvestment_threshold < 0:
            raise ValueError(
                f"reinvestment_threshold must be zero or positive, got {self.reinvestment_threshold!r}."
            )
        if self.reset_bankroll_amount is not None and self.reset_bankroll_amount <= 0:
            raise ValueError(
                f"reset_bankroll_amount must be positive when set, got {self.reset_bankroll_amount!r}."
            )
        if self.season_start_date is not None:
            try:
                datetime.strptime(self.season_start_date, DATE_FMT)
            except (TypeError, ValueError) as exc:
                raise ValueError("season_start_date must be in YYYY-MM-DD format.") from exc

    @property
    def stake_fraction(self) -> float:
        return self.daily_stake_percent / 100.0

    def replace(self, **changes) -> "SimulationParameters":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, object]:
        return dataclasses.asdict(self)

    def fingerprint(self) -> str:
        """Stable digest over every field; changes whenever any parameter does."""
        values = {k: float(v) if isinstance(v, int) else v for k, v in self.to_dict().items()}
        payload = json.dumps(values, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def _normalize_key(key: str) -> str:
    key = key.strip().lower()
    key = re.sub(r"[\s\-]+", "_", key)
    key = re.sub(r"[^a-z0-9_]", "", key)
    key = re.sub(r"_+", "_", key)
    return key


def _coerce_value(val: object) -> object:
    if val is None:
        return None
    if isinstance(val, (int, float)):
        return val
    s = str(val).strip()
    if s == "":
        return None
    try:
        num = float(s)
    except ValueError:
        return s
    if num.is_integer():
        return int(num)
    return num


def _read_params_file(path: Path) -> Dict[str, object]:
    params: Dict[str, object] = {}
    if path.suffix.lower() == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Params file must contain a JSON object: {path}")
        for key, value in data.items():
            params[_normalize_key(str(key))] = _coerce_value(value)
        return params
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            raw = line.strip()
            if not raw or raw.startswith("#"):
                continue
            match = re.match(r"^([^:=#]+)[:=]\s*(.+)$", raw)
            if not match:
                continue
            params[_normalize_key(match.group(1))] = _coerce_value(match.group(2))
    return params


def _get_param(params: Dict[str, object], names: tuple) -> tuple:
    """Return (found, value) for the first alias present in params."""
    for name in names:
        key = _normalize_key(name)
        if key in params:
            return True, params[key]
    return False, None


def _as_optional_float(value: object, label: str) -> Optional[float]:
    if value is None or (isinstance(value, str) and value.lower() in DISABLED_VALUES):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"{label} must be numeric, got {value!r}.")


def params_from_mapping(
    raw: Dict[str, object], base: Optional[SimulationParameters] = None
) -> SimulationParameters:
    """Overlay a loosely-keyed mapping onto ``base`` (defaults when omitted)."""
    normalized = {_normalize_key(str(k)): _coerce_value(v) for k, v in raw.items()}
    changes: Dict[str, object] = {}
    for field_name, names in PARAM_ALIASES.items():
        found, value = _get_param(normalized, names)
        if not found:
            continue
        if field_name == "season_start_date":
            changes[field_name] = str(value)[:10] if value is not None else None
        elif field_name in ("max_odds", "reset_bankroll_amount"):
            changes[field_name] = _as_optional_float(value, field_name)
        else:
            number = _as_optional_float(value, field_name)
            if number is None:
                raise ValueError(f"{field_name} cannot be disabled.")
            changes[field_name] = number
    return (base or SimulationParameters()).replace(**changes)


def load_simulation_params(
    path: Optional[Path], season_start_date: Optional[str] = None
) -> SimulationParameters:
    params = SimulationParameters()
    if path is not None and path.exists():
        params = params_from_mapping(_read_params_file(path), params)
    if season_start_date is not None:
        params = params.replace(season_start_date=season_start_date)
    return params
