# -*- coding: utf-8 -*-

"""
Day-by-day bankroll simulation over qualifying prediction records.

Every bet placed on a calendar day uses the same stake, sized from that day's
opening bankroll. Records whose outcome is unknown (or whose odds cannot be
resolved) stay in the history as no-bet rows and leave the bankroll untouched.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from betsim.normalize import PredictionRecord, normalize_record
from betsim.params import SimulationParameters


RecordLike = Union[PredictionRecord, Mapping[str, Any]]


def round_currency(value: float) -> float:
    """Round half-up to cents."""
    return math.floor(value * 100.0 + 0.5) / 100.0


def round_percent(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class SimulationState:
    bankroll: float
    current_date: str = ""
    day_opening_bankroll: float = 0.0
    per_bet_stake: float = 0.0
    total_reinvested: float = 0.0

    @classmethod
    def initial(cls, params: SimulationParameters) -> "SimulationState":
        start = round_currency(params.starting_bankroll)
        return cls(bankroll=start, day_opening_bankroll=start)


@dataclass(frozen=True)
class SimulationRow:
    record: PredictionRecord
    bankroll_after: float
    stake: Optional[float] = None
    signed_result: Optional[float] = None
    return_percent: Optional[int] = None
    reinvested: float = 0.0
    was_bankroll_reset: bool = False

    @property
    def date(self) -> str:
        return self.record.date

    @property
    def is_correct(self) -> Optional[bool]:
        return self.record.is_correct

    @property
    def predicted_odds(self) -> Optional[float]:
        return self.record.predicted_odds

    @property
    def is_bet(self) -> bool:
        return self.signed_result is not None

    def to_dict(self) -> Dict[str, object]:
        r = self.record
        return {
            "date": r.date,
            "matchup": r.matchup,
            "homeTeam": r.home_team,
            "awayTeam": r.away_team,
            "prediction": r.prediction,
            "predictionStrength": r.prediction_strength,
            "homeOdds": r.home_odds,
            "awayOdds": r.away_odds,
            "predictedOdds": r.predicted_odds,
            "actualWinner": r.actual_winner,
            "isCorrect": r.is_correct,
            "stake": self.stake,
            "signedResult": self.signed_result,
            "bankrollAfter": self.bankroll_after,
            "returnPercent": self.return_percent,
            "reinvested": self.reinvested,
            "wasBankrollReset": self.was_bankroll_reset,
            "source": dict(r.raw),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationRow":
        record = PredictionRecord(
            date=data.get("date") or "",
            home_team=data.get("homeTeam") or "",
            away_team=data.get("awayTeam") or "",
            prediction=data.get("prediction") or "",
            prediction_strength=data.get("predictionStrength"),
            home_odds=data.get("homeOdds"),
            away_odds=data.get("awayOdds"),
            predicted_odds=data.get("predictedOdds"),
            actual_winner=data.get("actualWinner") or "",
            is_correct=data.get("isCorrect"),
            matchup=data.get("matchup") or "",
            raw=dict(data.get("source") or {}),
        )
        return cls(
            record=record,
            bankroll_after=float(data["bankrollAfter"]),
            stake=data.get("stake"),
            signed_result=data.get("signedResult"),
            return_percent=data.get("returnPercent"),
            reinvested=float(data.get("reinvested") or 0.0),
            was_bankroll_reset=bool(data.get("wasBankrollReset")),
        )


def _as_record(item: RecordLike, aliases: Optional[Mapping[str, Sequence[str]]]) -> PredictionRecord:
    if isinstance(item, PredictionRecord):
        return item
    return normalize_record(item, aliases)


def qualifies(record: PredictionRecord, params: SimulationParameters) -> bool:
    strength = record.prediction_strength
    if strength is None or strength < params.strength_threshold:
        return False
    if params.season_start_date is not None and record.date < params.season_start_date:
        return False
    if params.max_odds is not None:
        if record.predicted_odds is None or record.predicted_odds > params.max_odds:
            return False
    return True


def order_records(records: Iterable[PredictionRecord]) -> List[PredictionRecord]:
    """Date ascending, strongest prediction first within a day."""
    return sorted(records, key=lambda r: (r.date, -(r.prediction_strength or 0.0)))


def _stake_for(opening: float, params: SimulationParameters) -> float:
    return round_currency(max(opening, 0.0) * params.stake_fraction)


def step(
    state: SimulationState, record: PredictionRecord, params: SimulationParameters
) -> Tuple[SimulationState, SimulationRow]:
    """Apply one record to the accumulator and emit its row."""
    bankroll = state.bankroll
    current_date = state.current_date
    opening = state.day_opening_bankroll
    stake = state.per_bet_stake
    total_reinvested = state.total_reinvested

    if record.date != current_date:
        current_date = record.date
        opening = bankroll
        stake = _stake_for(opening, params)

    was_reset = False
    if bankroll <= 0 and params.reset_bankroll_amount is not None:
        bankroll = round_currency(params.reset_bankroll_amount)
        was_reset = True
        opening = bankroll
        stake = _stake_for(opening, params)

    can_bet = (
        record.is_correct is not None
        and record.predicted_odds is not None
        and bankroll > 0
        and stake > 0
    )
    if not can_bet:
        new_state = SimulationState(bankroll, current_date, opening, stake, total_reinvested)
        return new_state, SimulationRow(record=record, bankroll_after=bankroll, was_bankroll_reset=was_reset)

    odds = record.predicted_odds
    reinvested = 0.0
    if record.is_correct:
        result = round_currency(stake * (odds - 1.0))
        return_percent = round_percent((odds - 1.0) * 100.0)
    else:
        result = -stake
        return_percent = -100
        threshold = params.reinvestment_threshold
        if threshold > 0 and total_reinvested < threshold:
            reinvested = round_currency(min(stake, threshold - total_reinvested))
            total_reinvested = round_currency(total_reinvested + reinvested)

    bankroll = round_currency(bankroll + result + reinvested)
    new_state = SimulationState(bankroll, current_date, opening, stake, total_reinvested)
    row = SimulationRow(
        record=record,
        bankroll_after=bankroll,
        stake=stake,
        signed_result=result,
        return_percent=return_percent,
        reinvested=reinvested,
        was_bankroll_reset=was_reset,
    )
    return new_state, row


def simulate_with_state(
    records: Iterable[RecordLike],
    params: SimulationParameters,
    aliases: Optional[Mapping[str, Sequence[str]]] = None,
) -> Tuple[List[SimulationRow], SimulationState]:
    normalized = [_as_record(item, aliases) for item in records]
    ordered = order_records(r for r in normalized if qualifies(r, params))

    state = SimulationState.initial(params)
    rows: List[SimulationRow] = []
    for record in ordered:
        state, row = step(state, record, params)
        rows.append(row)
    return rows, state


def simulate(
    records: Iterable[RecordLike],
    params: SimulationParameters,
    aliases: Optional[Mapping[str, Sequence[str]]] = None,
) -> List[SimulationRow]:
    rows, _ = simulate_with_state(records, params, aliases)
    return rows
