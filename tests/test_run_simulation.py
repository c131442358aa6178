import json
import tempfile
import unittest
from pathlib import Path

from betsim.cache import MemoryCache
from betsim.params import SimulationParameters
from scripts.run_simulation import run, write_json
from scripts.validate_simulation_payload import validate


def _row(date, strength, correct, home="BOS", away="NYK", pred=None, home_ml=1.8, away_ml=2.1):
    return {
        "id": 1,
        "gameDate": date,
        "teamOne": home,
        "teamTwo": away,
        "prediction": pred or home,
        "predictionStrength": strength,
        "winner": "UNKNOWN" if correct == -1 else (pred or home) if correct == 1 else "OTHER",
        "predictionCorrectness": correct,
        "homeML": home_ml,
        "awayML": away_ml,
    }


class TestRunArchive(unittest.TestCase):
    def _write_dataset(self, root: Path, name: str, rows) -> Path:
        path = root / name
        path.write_text(json.dumps({"tables": {"performance": rows}}), encoding="utf-8")
        return path

    def test_archive_uses_season_start_and_cache(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self._write_dataset(
                root,
                "2024Database.json",
                [
                    _row("2024-11-01", 90, 1),
                    _row("2024-12-01", 80, 1),
                    _row("2024-12-02", 85, 0),
                    _row("2024-12-03", 60, 1),
                ],
            )
            cache = MemoryCache()
            payloads = run("2024", root, SimulationParameters(), cache)

        summary = payloads["simulation_summary.json"]
        rows = payloads["simulation_rows.json"]["rows"]
        self.assertEqual(summary["season_start"], "2024-11-22")
        self.assertEqual(len(rows), 2)
        self.assertEqual(summary["statistics"]["totalBets"], 2)
        self.assertEqual(summary["records"]["simulated_rows"], 2)
        self.assertEqual(summary["source"]["main_file"], "2024Database.json")
        self.assertEqual(len(cache), 1)
        self.assertEqual(payloads["favourites.json"]["rows"], [])
        validate(summary, payloads["simulation_rows.json"])

    def test_live_dataset_is_not_cached_and_loads_favourites(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self._write_dataset(root, "database.json", [_row("2025-12-01", 80, 1), _row("2025-12-02", 75, -1)])
            (root / "dayOf.json").write_text(
                json.dumps({"tables": {"TodayRecommendations": [{"home": "BOS", "away": "NYK", "ml": 1.6}]}}),
                encoding="utf-8",
            )
            cache = MemoryCache()
            payloads = run("live", root, SimulationParameters(), cache)

        self.assertEqual(len(cache), 0)
        self.assertEqual(len(payloads["favourites.json"]["rows"]), 1)
        rows = payloads["simulation_rows.json"]["rows"]
        self.assertIsNone(rows[1]["stake"])
        self.assertEqual(rows[1]["bankrollAfter"], rows[0]["bankrollAfter"])

    def test_csv_fallback(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "2023Database.csv").write_text(
                "gameDate,teamOne,teamTwo,prediction,predictionStrength,predictionCorrectness,homeML,awayML\n"
                "2023-12-01,BOS,NYK,BOS,80,1,1.8,2.1\n",
                encoding="utf-8",
            )
            payloads = run("2023", root, SimulationParameters(), None)
        self.assertEqual(payloads["simulation_summary.json"]["statistics"]["finalBankroll"], 3960.0)

    def test_missing_dataset_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError) as ctx:
                run("2024", Path(tmp), SimulationParameters())
            self.assertIn("2024Database.json", str(ctx.exception))

    def test_empty_dataset_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self._write_dataset(root, "2023Database.json", [])
            with self.assertRaises(RuntimeError):
                run("2023", root, SimulationParameters())

    def test_no_qualifying_rows_note(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self._write_dataset(root, "2023Database.json", [_row("2023-12-01", 40, 1)])
            payloads = run("2023", root, SimulationParameters())
        rows_payload = payloads["simulation_rows.json"]
        self.assertEqual(rows_payload["rows"], [])
        self.assertIn("No rows available after filters", rows_payload["note"])
        stats = payloads["simulation_summary.json"]["statistics"]
        self.assertEqual(stats["winRatePercent"], 0)
        self.assertEqual(stats["averageReturnPercent"], 0)


class TestWriteJson(unittest.TestCase):
    def test_creates_parent_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "out.json"
            write_json(path, {"a": "—"})
            self.assertEqual(json.loads(path.read_text(encoding="utf-8")), {"a": "—"})


if __name__ == "__main__":
    unittest.main()
