#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Run the bankroll simulation for one prediction dataset and write JSON artifacts.

Data contract overview:
- Prediction history: <data-dir>/<dataset main file> (JSON tables or CSV).
- Today's recommendations: <data-dir>/dayOf.json (live dataset only, optional).
- Output: simulation_rows.json, simulation_summary.json, favourites.json in --output-dir.

Archive seasons are cached per parameter fingerprint; the live dataset is
always recomputed.
"""

from __future__ import annotations

import argparse
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from betsim.cache import JsonFileCache, ResultCache, SimulationResult, run_cached
from betsim.datasets import DatasetSource, FavouriteRow, load_favourites, load_rows, resolve_dataset
from betsim.params import SimulationParameters, load_simulation_params
from betsim.stats import build_bankroll_history, compute_max_drawdown


def resolve_data_root(cli_root: Optional[str], repo_root: Path) -> Optional[Path]:
    env_root = os.getenv("DATA_ROOT", "").strip()
    if env_root:
        candidate = Path(env_root).expanduser().resolve()
        if candidate.exists():
            return candidate
    if cli_root:
        candidate = Path(cli_root).expanduser().resolve()
        if candidate.exists():
            return candidate
    fallback = repo_root / "public" / "data"
    if fallback.exists():
        return fallback.resolve()
    return None


def _label_path(path: Optional[Path]) -> str:
    if not path:
        return "missing"
    return path.name


def _find_main_file(data_dir: Path, source_info: DatasetSource) -> Path:
    candidate = data_dir / source_info.main_file
    if candidate.exists():
        return candidate
    csv_candidate = candidate.with_suffix(".csv")
    if csv_candidate.exists():
        return csv_candidate
    raise FileNotFoundError(f"Required dataset file missing: {candidate}")


def build_payloads(
    result: SimulationResult,
    source_info: DatasetSource,
    main_path: Path,
    favourites: List[FavouriteRow],
) -> Dict[str, Dict[str, object]]:
    params = result.params
    stats = result.statistics
    history = build_bankroll_history(result.rows)
    max_dd, max_dd_pct = compute_max_drawdown(history)
    last_run = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
    as_of_date = result.rows[-1].date if result.rows else "—"

    summary_payload = {
        "last_run": last_run,
        "dataset": source_info.key,
        "dataset_label": source_info.label,
        "as_of_date": as_of_date,
        "season_start": params.season_start_date,
        "params": params.to_dict(),
        "params_fingerprint": params.fingerprint(),
        "statistics": stats.to_dict() if stats else None,
        "kpis": {
            "max_drawdown": max_dd,
            "max_drawdown_pct": max_dd_pct,
        },
        "bankroll_history": history,
        "records": {
            "simulated_rows": len(result.rows),
            "bets_placed": stats.total_bets if stats else 0,
            "favourites": len(favourites),
        },
        "source": {"main_file": _label_path(main_path)},
    }
    rows_payload = {
        "dataset": source_info.key,
        "as_of_date": as_of_date,
        "rows": [row.to_dict() for row in result.rows],
        "note": "" if result.rows else (
            f"No rows available after filters ({params.strength_threshold:g}+ strength, "
            f"start {params.season_start_date or '—'}, odds ≤ {params.max_odds if params.max_odds else '∞'})"
        ),
    }
    favourites_payload = {
        "dataset": source_info.key,
        "rows": [fav.to_dict() for fav in favourites],
    }
    return {
        "simulation_summary.json": summary_payload,
        "simulation_rows.json": rows_payload,
        "favourites.json": favourites_payload,
    }


def write_json(path: Path, payload: Dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def run(
    dataset: str,
    data_dir: Path,
    params: SimulationParameters,
    cache: Optional[ResultCache] = None,
) -> Dict[str, Dict[str, object]]:
    source_info = resolve_dataset(dataset)
    if params.season_start_date is None:
        params = params.replace(season_start_date=source_info.season_start)

    main_path = _find_main_file(data_dir, source_info)
    rows = load_rows(main_path)
    if not rows:
        raise RuntimeError(f"No prediction rows found in {main_path}.")

    result = run_cached(source_info.key, rows, params, cache if source_info.is_archive else None)

    favourites: List[FavouriteRow] = []
    if source_info.today_file:
        favourites = load_favourites(data_dir / source_info.today_file)
    return build_payloads(result, source_info, main_path, favourites)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--dataset", type=str, default="live", help="live, 2024 or 2023.")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory holding the dataset JSON files (fallback when DATA_ROOT is unset).",
    )
    parser.add_argument("--params", type=str, default=None, help="Params file (.json or key: value text).")
    parser.add_argument("--season-start", type=str, default=None, help="Override season start (YYYY-MM-DD).")
    parser.add_argument("--output-dir", type=str, default=None)
    parser.add_argument("--cache-dir", type=str, default=None)
    parser.add_argument("--no-cache", action="store_true", help="Always recompute archive seasons.")
    args = parser.parse_args()

    repo_root = Path(__file__).resolve().parents[1]
    data_dir = resolve_data_root(args.data_dir, repo_root)
    if data_dir is None:
        raise FileNotFoundError("No data directory found (set DATA_ROOT or pass --data-dir).")

    output_dir = Path(args.output_dir) if args.output_dir else repo_root / "public" / "data" / "simulation"
    params = load_simulation_params(Path(args.params) if args.params else None, args.season_start)

    cache: Optional[ResultCache] = None
    if not args.no_cache:
        cache_dir = Path(args.cache_dir) if args.cache_dir else output_dir / ".cache"
        cache = JsonFileCache(cache_dir)

    payloads = run(args.dataset, data_dir, params, cache)
    for name, payload in payloads.items():
        write_json(output_dir / name, payload)

    print(f"Wrote {', '.join(payloads)} to {output_dir}")


if __name__ == "__main__":
    main()
