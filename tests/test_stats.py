import pytest

from betsim.params import SimulationParameters
from betsim.simulate import simulate
from betsim.stats import build_bankroll_history, compute_max_drawdown, count_results, summarize


def _game(date, strength=80, correct=1, home="BOS", home_ml=1.8):
    return {
        "date": date,
        "home_team": home,
        "away_team": "NYK",
        "prediction": home,
        "prediction_strength": strength,
        "predictionCorrectness": correct,
        "home_ml": home_ml,
        "away_ml": 2.1,
    }


PARAMS = SimulationParameters(season_start_date="2024-11-22")


def test_summary_with_no_bets():
    stats = summarize([], PARAMS.starting_bankroll)
    assert stats.total_bets == 0
    assert stats.win_rate_percent == 0
    assert stats.average_return_percent == 0
    assert stats.total_profit_and_loss == 0.0
    assert stats.final_bankroll == 3000.0
    assert stats.peak_bankroll == 3000.0
    assert stats.peak_bankroll_date is None


def test_summary_only_unknown_outcomes():
    rows = simulate([_game("2024-12-01", correct=-1)], PARAMS)
    stats = summarize(rows, PARAMS.starting_bankroll)
    assert len(rows) == 1
    assert stats.total_bets == 0
    assert stats.win_rate_percent == 0
    assert stats.average_return_percent == 0


def test_summary_win_then_loss():
    rows = simulate([_game("2024-12-01"), _game("2024-12-02", correct=0)], PARAMS)
    stats = summarize(rows, PARAMS.starting_bankroll)
    assert stats.total_bets == 2
    assert (stats.wins, stats.losses) == (1, 1)
    assert stats.win_rate_percent == 50
    assert stats.total_profit_and_loss == pytest.approx(-624.0)
    assert stats.total_staked == pytest.approx(2784.0)
    assert stats.average_return_percent == -22
    assert stats.final_bankroll == pytest.approx(2376.0)
    assert stats.peak_bankroll == pytest.approx(3960.0)
    assert stats.peak_bankroll_date == "2024-12-01"


def test_final_bankroll_matches_start_plus_pnl():
    games = [
        _game("2024-12-01", home_ml=1.37),
        _game("2024-12-01", strength=95, home="LAL", home_ml=1.91),
        _game("2024-12-02", correct=0, home_ml=1.66),
        _game("2024-12-03", home_ml=1.23),
        _game("2024-12-04", correct=-1),
        _game("2024-12-05", home_ml=1.52),
    ]
    rows = simulate(games, PARAMS)
    stats = summarize(rows, PARAMS.starting_bankroll)
    bets = sum(1 for r in rows if r.is_bet)
    assert stats.final_bankroll == pytest.approx(rows[-1].bankroll_after, abs=0.01 * bets)
    assert stats.final_bankroll == pytest.approx(PARAMS.starting_bankroll + stats.total_profit_and_loss, abs=0.01)


def test_peak_keeps_first_occurrence():
    games = [_game("2024-12-01"), _game("2024-12-02", correct=-1), _game("2024-12-03", correct=-1)]
    rows = simulate(games, PARAMS)
    stats = summarize(rows, PARAMS.starting_bankroll)
    assert stats.peak_bankroll == pytest.approx(3960.0)
    assert stats.peak_bankroll_date == "2024-12-01"


def test_reset_is_counted():
    params = PARAMS.replace(starting_bankroll=1000, daily_stake_percent=100)
    rows = simulate([_game("2024-12-01", correct=0), _game("2024-12-02")], params)
    stats = summarize(rows, params.starting_bankroll)
    assert stats.bankroll_resets == 1
    assert stats.final_bankroll == pytest.approx(400.0)


def test_count_results_ignores_no_bet_rows():
    rows = simulate([_game("2024-12-01"), _game("2024-12-02", correct=-1), _game("2024-12-03", correct=0)], PARAMS)
    assert count_results(rows) == (1, 1)


def test_bankroll_history_one_entry_per_day():
    games = [_game("2024-12-01"), _game("2024-12-01", strength=90, home="LAL"), _game("2024-12-02", correct=0)]
    rows = simulate(games, PARAMS)
    history = build_bankroll_history(rows)
    assert [h["date"] for h in history] == ["2024-12-01", "2024-12-02"]
    assert history[0]["betsPlaced"] == 2
    assert history[0]["profit"] == pytest.approx(1920.0)
    assert history[0]["balance"] == pytest.approx(4920.0)
    assert history[1]["profit"] == pytest.approx(-1968.0)


def test_max_drawdown():
    history = [{"balance": b} for b in (3000.0, 3960.0, 2376.0, 3000.0)]
    max_dd, max_dd_pct = compute_max_drawdown(history)
    assert max_dd == pytest.approx(1584.0)
    assert max_dd_pct == pytest.approx(40.0)


def test_max_drawdown_empty():
    assert compute_max_drawdown([]) == (0.0, 0.0)


def test_max_drawdown_percent_is_whole():
    history = [{"balance": b} for b in (3000.0, 2000.0)]
    max_dd, max_dd_pct = compute_max_drawdown(history)
    assert max_dd == pytest.approx(1000.0)
    assert max_dd_pct == 33
    assert isinstance(max_dd_pct, int)
