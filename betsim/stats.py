# -*- coding: utf-8 -*-

"""Aggregate statistics over simulated rows."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from betsim.simulate import SimulationRow, round_currency, round_percent


@dataclass(frozen=True)
class AggregateStatistics:
    total_bets: int
    wins: int
    losses: int
    win_rate_percent: int
    total_profit_and_loss: float
    total_staked: float
    final_bankroll: float
    average_return_percent: int
    peak_bankroll: float
    peak_bankroll_date: Optional[str]
    bankroll_resets: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "totalBets": self.total_bets,
            "wins": self.wins,
            "losses": self.losses,
            "winRatePercent": self.win_rate_percent,
            "totalProfitAndLoss": self.total_profit_and_loss,
            "totalStaked": self.total_staked,
            "finalBankroll": self.final_bankroll,
            "averageReturnPercent": self.average_return_percent,
            "peakBankroll": self.peak_bankroll,
            "peakBankrollDate": self.peak_bankroll_date,
            "bankrollResets": self.bankroll_resets,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AggregateStatistics":
        return cls(
            total_bets=int(data["totalBets"]),
            wins=int(data["wins"]),
            losses=int(data["losses"]),
            win_rate_percent=int(data["winRatePercent"]),
            total_profit_and_loss=float(data["totalProfitAndLoss"]),
            total_staked=float(data["totalStaked"]),
            final_bankroll=float(data["finalBankroll"]),
            average_return_percent=int(data["averageReturnPercent"]),
            peak_bankroll=float(data["peakBankroll"]),
            peak_bankroll_date=data.get("peakBankrollDate"),
            bankroll_resets=int(data.get("bankrollResets") or 0),
        )


def _safe_div(num: float, den: float) -> float:
    return num / den if den else 0.0


def count_results(rows: Sequence[SimulationRow]) -> Tuple[int, int]:
    wins = 0
    losses = 0
    for row in rows:
        if not row.is_bet:
            continue
        if row.is_correct:
            wins += 1
        else:
            losses += 1
    return wins, losses


def summarize(rows: Sequence[SimulationRow], starting_bankroll: float) -> AggregateStatistics:
    finished = [row for row in rows if row.is_bet]
    total_bets = len(finished)
    wins, losses = count_results(finished)
    pnl = round_currency(sum(row.signed_result for row in finished))
    total_staked = round_currency(sum(row.stake for row in finished))

    peak = round_currency(starting_bankroll)
    peak_date: Optional[str] = None
    for row in rows:
        if row.bankroll_after > peak:
            peak = row.bankroll_after
            peak_date = row.date

    return AggregateStatistics(
        total_bets=total_bets,
        wins=wins,
        losses=losses,
        win_rate_percent=round_percent(_safe_div(wins, total_bets) * 100.0),
        total_profit_and_loss=pnl,
        total_staked=total_staked,
        final_bankroll=round_currency(starting_bankroll + pnl),
        average_return_percent=round_percent(_safe_div(pnl, total_staked) * 100.0),
        peak_bankroll=peak,
        peak_bankroll_date=peak_date,
        bankroll_resets=sum(1 for row in rows if row.was_bankroll_reset),
    )


def build_bankroll_history(rows: Sequence[SimulationRow]) -> List[Dict[str, object]]:
    if not rows:
        return []
    per_day = defaultdict(lambda: {"profit": 0.0, "bets": 0, "balance": None})
    for row in rows:
        day = per_day[row.date]
        if row.is_bet:
            day["profit"] += row.signed_result
            day["bets"] += 1
        day["balance"] = row.bankroll_after

    output = []
    for d in sorted(per_day.keys()):
        output.append(
            {
                "date": d,
                "balance": per_day[d]["balance"],
                "betsPlaced": per_day[d]["bets"],
                "profit": round_currency(per_day[d]["profit"]),
            }
        )
    return output


def compute_max_drawdown(history: List[Dict[str, object]]) -> Tuple[float, int]:
    if not history:
        return 0.0, 0
    balances = [h["balance"] for h in history if h["balance"] is not None]
    peak = None
    peak_at_max = None
    max_dd = 0.0
    for b in balances:
        if peak is None or b > peak:
            peak = b
        if peak:
            dd = peak - b
            if dd > max_dd:
                max_dd = dd
                peak_at_max = peak
    max_dd_pct = round_percent(_safe_div(max_dd, peak_at_max) * 100.0) if peak_at_max else 0
    return round_currency(max_dd), max_dd_pct
