import copy

import pytest

from scripts.validate_simulation_payload import validate


def _payloads():
    rows = [
        {"date": "2024-12-01", "stake": 1200.0, "signedResult": 960.0, "bankrollAfter": 3960.0,
         "wasBankrollReset": False},
        {"date": "2024-12-01", "stake": 1200.0, "signedResult": -1200.0, "bankrollAfter": 2760.0,
         "wasBankrollReset": False},
        {"date": "2024-12-02", "stake": None, "signedResult": None, "bankrollAfter": 2760.0,
         "wasBankrollReset": False},
    ]
    summary = {
        "dataset": "2024",
        "as_of_date": "2024-12-02",
        "params": {"starting_bankroll": 3000.0},
        "params_fingerprint": "abc",
        "statistics": {
            "totalBets": 2,
            "wins": 1,
            "losses": 1,
            "winRatePercent": 50,
            "totalProfitAndLoss": -240.0,
            "finalBankroll": 2760.0,
            "averageReturnPercent": -10,
            "peakBankroll": 3960.0,
        },
        "records": {"simulated_rows": 3},
    }
    return summary, {"rows": rows}


def test_valid_payload_passes():
    summary, rows = _payloads()
    validate(summary, rows)


def test_final_bankroll_mismatch_fails():
    summary, rows = _payloads()
    summary["statistics"]["finalBankroll"] = 2900.0
    with pytest.raises(ValueError, match="finalBankroll"):
        validate(summary, rows)


def test_same_day_stakes_must_match():
    summary, rows = _payloads()
    rows = copy.deepcopy(rows)
    rows["rows"][1]["stake"] = 1000.0
    with pytest.raises(ValueError, match="share one stake"):
        validate(summary, rows)


def test_row_count_mismatch_fails():
    summary, rows = _payloads()
    summary["records"]["simulated_rows"] = 4
    with pytest.raises(ValueError, match="simulated_rows"):
        validate(summary, rows)


def test_missing_statistics_field_fails():
    summary, rows = _payloads()
    del summary["statistics"]["peakBankroll"]
    with pytest.raises(ValueError, match="peakBankroll"):
        validate(summary, rows)


def test_reset_on_no_bet_row_allows_new_stake():
    summary, rows = _payloads()
    rows = copy.deepcopy(rows)
    rows["rows"][2] = {"date": "2024-12-01", "stake": None, "signedResult": None, "bankrollAfter": 500.0,
                       "wasBankrollReset": True}
    rows["rows"].append({"date": "2024-12-01", "stake": 200.0, "signedResult": 160.0, "bankrollAfter": 660.0,
                         "wasBankrollReset": False})
    summary["records"]["simulated_rows"] = 4
    summary["statistics"].update(totalBets=3, wins=2, totalProfitAndLoss=-80.0, finalBankroll=2920.0)
    validate(summary, rows)
