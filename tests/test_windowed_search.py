import numpy as np
import pytest

import trial_runner
from config import MAX_GAIN, MIN_GAIN
from exceptions import ConfigurationError
from slide_environment import GainTriple
from trial_runner import evaluate_gains
from Windowed_Search import WindowedSearch


def test_window_shrinks_geometrically(quiet_search_kwargs):
    tuner = WindowedSearch(**quiet_search_kwargs)
    tuner.optimize(3)
    assert tuner.window == pytest.approx(25.0 * 0.90 ** 3)
    assert tuner.window_history == pytest.approx([25.0, 22.5, 20.25])
    assert tuner.generations_run == 3
    assert len(tuner.best_cost_history) == 4


def test_returns_best_of_final_ranking(quiet_search_kwargs):
    tuner = WindowedSearch(**quiet_search_kwargs)
    best = tuner.optimize(2)
    assert isinstance(best, GainTriple)
    assert best == tuner.candidates[0].gains
    costs = [c.average_cost for c in tuner.candidates]
    assert costs == sorted(costs)
    assert len(tuner.candidates) <= 5


def test_zero_generations_returns_first_ranking(quiet_search_kwargs):
    tuner = WindowedSearch(**quiet_search_kwargs)
    best = tuner.optimize(0)
    assert best == tuner.best.gains
    assert tuner.window == 25.0
    assert tuner.window_history == []


def test_seeded_search_is_reproducible(quiet_search_kwargs):
    assert WindowedSearch(**quiet_search_kwargs).optimize(1) == WindowedSearch(**quiet_search_kwargs).optimize(1)


def test_narrow_ranges_clamp_to_bounds():
    tuner = WindowedSearch(workers=1, verbose=False)
    ranges = tuner.narrow_ranges((0.02, 99.0, 50.0), 25.0)
    assert ranges[0] == pytest.approx((MIN_GAIN, 25.02))
    assert ranges[1] == pytest.approx((74.0, MAX_GAIN))
    assert ranges[2] == pytest.approx((25.0, 75.0))


def test_kd_floor_uses_ki_minimum():
    tuner = WindowedSearch(gain_ranges=[(0.01, 100.0), (1.0, 100.0), (0.01, 100.0)],
                           workers=1, verbose=False)
    assert tuner.narrow_ranges((5.0, 5.0, 0.5), 2.0)[2] == pytest.approx((1.0, 2.5))
    assert tuner.narrow_ranges((5.0, 5.0, 0.02), 0.1)[2] == pytest.approx((1.0, 1.0))


def test_sampled_gains_never_leave_bounds(monkeypatch, quiet_search_kwargs):
    seen = []
    real_run_trials = trial_runner.run_trials

    def recording_run_trials(*args, **kwargs):
        samples = real_run_trials(*args, **kwargs)
        seen.extend(samples)
        return samples

    monkeypatch.setattr('Windowed_Search.run_trials', recording_run_trials)
    # A window wider than the whole range clamps on every side
    tuner = WindowedSearch(starting_window=200.0, **quiet_search_kwargs)
    tuner.optimize(2)
    assert seen
    for sample in seen:
        for gain in sample.gains:
            assert MIN_GAIN <= gain <= MAX_GAIN


def test_elitism_never_worsens_best_cost(quiet_search_kwargs):
    tuner = WindowedSearch(elitism=True, **quiet_search_kwargs)
    tuner.optimize(3)
    history = tuner.best_cost_history
    assert all(later <= earlier for earlier, later in zip(history, history[1:]))


def test_best_gains_history_tracks_each_generation(quiet_search_kwargs):
    tuner = WindowedSearch(**quiet_search_kwargs)
    best = tuner.optimize(2)
    assert len(tuner.best_gains_history) == 3
    assert tuner.best_gains_history[-1] == best


def test_search_improves_on_first_generation():
    seeds = range(6)
    first_costs, final_costs = [], []
    for seed in seeds:
        tuner = WindowedSearch(trials=8, sims_per_trial=4, seed=seed,
                               verbose=False, show_progress=False)
        final_best = tuner.optimize(5)
        assert not tuner.elitism

        # Re-score both on the same set of moves
        first_costs.append(evaluate_gains(tuner.best_gains_history[0], seed=99, sims_per_trial=20).average_cost)
        final_costs.append(evaluate_gains(final_best, seed=99, sims_per_trial=20).average_cost)

    improved = sum(final <= first for first, final in zip(first_costs, final_costs))
    assert improved >= len(seeds) - 1


def test_prints_generation_summary(capsys):
    tuner = WindowedSearch(trials=3, sims_per_trial=1, seed=1, workers=1, verbose=True, show_progress=False)
    tuner.optimize(1)
    out = capsys.readouterr().out
    assert "Generation 0/1" in out
    assert "Generation 1/1" in out
    assert "Best Gains:" in out


@pytest.mark.parametrize("kwargs", [
    dict(shrink_factor=1.5),
    dict(shrink_factor=0.0),
    dict(starting_window=-1.0),
    dict(starting_window=float('nan')),
    dict(top_k=0),
    dict(gain_ranges=[(0.01, 100.0), (0.01, 100.0)]),
    dict(gain_ranges=[(0.01, 100.0), (float('nan'), 100.0), (0.01, 100.0)]),
])
def test_invalid_configuration(kwargs):
    with pytest.raises(ConfigurationError):
        WindowedSearch(workers=1, verbose=False, **kwargs)


def test_negative_generations(quiet_search_kwargs):
    with pytest.raises(ConfigurationError):
        WindowedSearch(**quiet_search_kwargs).optimize(-1)


def test_parallel_search_runs():
    tuner = WindowedSearch(trials=4, sims_per_trial=1, seed=2, workers=2, verbose=False, show_progress=False)
    best = tuner.optimize(1)
    assert all(MIN_GAIN <= g <= MAX_GAIN for g in best)
    assert np.isfinite(tuner.best.average_cost)
