#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List


REQUIRED_SUMMARY = [
    "dataset",
    "as_of_date",
    "params",
    "params_fingerprint",
    "statistics",
    "records",
]
REQUIRED_STATISTICS = [
    "totalBets",
    "wins",
    "losses",
    "winRatePercent",
    "totalProfitAndLoss",
    "finalBankroll",
    "averageReturnPercent",
    "peakBankroll",
]
# one cent per rounding step
ROUNDING_TOLERANCE = 0.01


def _require_fields(data: Dict[str, Any], keys: List[str], label: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        raise ValueError(f"Missing {label} fields: {', '.join(missing)}")


def _assert(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


def _load_object(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a JSON object.")
    return data


def validate(summary: Dict[str, Any], rows_payload: Dict[str, Any]) -> None:
    _require_fields(summary, REQUIRED_SUMMARY, "summary")
    stats = summary.get("statistics")
    if not isinstance(stats, dict):
        raise ValueError("summary.statistics must be an object.")
    _require_fields(stats, REQUIRED_STATISTICS, "statistics")

    rows = rows_payload.get("rows")
    _assert(isinstance(rows, list), "simulation_rows.rows must be an array.")
    _assert(
        len(rows) == summary["records"].get("simulated_rows"),
        "rows length must match records.simulated_rows.",
    )

    bets = [row for row in rows if row.get("signedResult") is not None]
    _assert(len(bets) == stats["totalBets"], "statistics.totalBets must match rows with a result.")
    _assert(stats["wins"] + stats["losses"] == stats["totalBets"], "wins + losses must equal totalBets.")

    start = float(summary["params"]["starting_bankroll"])
    tolerance = ROUNDING_TOLERANCE * max(len(bets), 1)
    _assert(
        abs(stats["finalBankroll"] - (start + stats["totalProfitAndLoss"])) <= tolerance,
        "finalBankroll must equal starting bankroll plus total profit and loss.",
    )

    per_day_stake: Dict[str, float] = {}
    for row in rows:
        if row.get("wasBankrollReset"):
            # stake is resized from the reset balance
            per_day_stake.pop(row["date"], None)
        if row.get("signedResult") is None:
            continue
        stake = row.get("stake")
        _assert(isinstance(stake, (int, float)) and stake > 0, "every bet must carry a positive stake.")
        seen = per_day_stake.setdefault(row["date"], stake)
        _assert(seen == stake, f"bets on {row['date']} must share one stake.")

    if not bets:
        _assert(stats["winRatePercent"] == 0, "winRatePercent must be 0 with no bets.")
        _assert(stats["averageReturnPercent"] == 0, "averageReturnPercent must be 0 with no bets.")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--dir",
        type=str,
        default="public/data/simulation",
        help="Directory holding simulation_summary.json and simulation_rows.json.",
    )
    args = parser.parse_args()
    out_dir = Path(args.dir)

    summary = _load_object(out_dir / "simulation_summary.json")
    rows_payload = _load_object(out_dir / "simulation_rows.json")
    validate(summary, rows_payload)
    print(f"simulation payload OK: {out_dir}")


if __name__ == "__main__":
    main()
