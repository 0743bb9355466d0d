"""Parallel evaluation of randomly sampled PID gain triples.

Every trial draws one (kp, ki, kd) triple and scores it by averaging the cost
of SUB_SIMULATIONS moves with random start and target positions. Trials are
independent, so they are spread over a process pool; each task gets its own
seeded generator and the results come back in submission order.
"""
import math
from dataclasses import dataclass, field
from multiprocessing import Pool, cpu_count

import numpy as np
from tqdm import tqdm

from config import MAX_GAIN, MIN_GAIN, SUB_SIMULATIONS
from exceptions import ConfigurationError, TrialError
from slide_drive import SlideConfig
from slide_environment import GainTriple, SlideEnvironment


@dataclass(order=True)
class ScoredSample:
    average_cost: float
    gains: GainTriple = field(compare=False)


def validate_range(name, gain_range, bounds=(MIN_GAIN, MAX_GAIN)):
    """Return gain_range as floats, or raise ConfigurationError if it is unusable."""
    try:
        lo, hi = (float(v) for v in gain_range)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} range must be a (min, max) pair, got {gain_range!r}") from exc
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ConfigurationError(f"{name} range must be finite, got ({lo}, {hi})")
    if lo > hi:
        raise ConfigurationError(f"{name} range is reversed: ({lo}, {hi})")
    if lo < bounds[0] or hi > bounds[1]:
        raise ConfigurationError(
            f"{name} range ({lo}, {hi}) is outside the allowed bounds {tuple(bounds)}")
    return lo, hi


def evaluate_gains(gains, seed=None, sims_per_trial=SUB_SIMULATIONS, cfg=None):
    """
    Average cost of one gain triple over randomized moves.

    Start positions are drawn from the retracted half of travel and targets
    from the extended half.

    Args:
        gains: (kp, ki, kd)
        seed: Seed for this trial's start/target draws
        sims_per_trial: Number of moves to average
        cfg: SlideConfig, horizontal slide if None

    Returns:
        ScoredSample
    """
    cfg = cfg if cfg is not None else SlideConfig.horizontal()
    rng = np.random.default_rng(seed)
    env = SlideEnvironment(gains, cfg)

    costs = []
    for _ in range(sims_per_trial):
        starting_position = rng.uniform(cfg.starting_length, cfg.travel_mid)
        target_position = rng.uniform(cfg.travel_mid, cfg.max_length)
        costs.append(env.run_simulation(starting_position, target_position).total_cost)

    return ScoredSample(float(np.mean(costs)), env.gains)


def _run_trial(task):
    gains, seed, sims_per_trial, cfg = task
    return evaluate_gains(gains, seed, sims_per_trial, cfg)


def run_trials(kp_range, ki_range, kd_range, trials, sims_per_trial=SUB_SIMULATIONS,
               rng=None, pool=None, workers=None, cfg=None, progress=False, desc="Trials"):
    """
    Sample and score `trials` random gain triples.

    Args:
        kp_range, ki_range, kd_range: Inclusive (min, max) sampling ranges
        trials: Number of gain triples to sample
        sims_per_trial: Moves averaged per gain triple
        rng: numpy Generator used for sampling (fresh entropy if None)
        pool: Open multiprocessing Pool to dispatch into
        workers: Pool size when no pool is given; 1 evaluates in this process
        cfg: SlideConfig, horizontal slide if None
        progress: Show a tqdm bar

    Returns:
        List of ScoredSample in sampling order, one per trial
    """
    kp_range = validate_range('kP', kp_range)
    ki_range = validate_range('kI', ki_range)
    kd_range = validate_range('kD', kd_range)
    if not isinstance(trials, (int, np.integer)) or trials < 1:
        raise ConfigurationError(f"trials must be a positive integer, got {trials!r}")
    if not isinstance(sims_per_trial, (int, np.integer)) or sims_per_trial < 1:
        raise ConfigurationError(f"sims_per_trial must be a positive integer, got {sims_per_trial!r}")
    trials = int(trials)
    sims_per_trial = int(sims_per_trial)

    rng = rng if rng is not None else np.random.default_rng()
    kps = rng.uniform(kp_range[0], kp_range[1], size=trials)
    kis = rng.uniform(ki_range[0], ki_range[1], size=trials)
    kds = rng.uniform(kd_range[0], kd_range[1], size=trials)
    seeds = rng.integers(2**63 - 1, size=trials)

    tasks = [(GainTriple(float(kp), float(ki), float(kd)), int(seed), sims_per_trial, cfg)
             for kp, ki, kd, seed in zip(kps, kis, kds, seeds)]

    try:
        if pool is not None:
            return _collect(pool, tasks, progress, desc)
        if workers == 1:
            return list(tqdm(map(_run_trial, tasks), total=trials, desc=desc,
                             disable=not progress, leave=False))
        with Pool(processes=workers or cpu_count()) as own_pool:
            return _collect(own_pool, tasks, progress, desc)
    except Exception as exc:
        raise TrialError(f"Trial batch of {trials} failed: {exc}") from exc


def _collect(pool, tasks, progress, desc):
    # Block until every trial of this batch is back
    chunksize = max(1, len(tasks) // (cpu_count() * 4))
    return list(tqdm(pool.imap(_run_trial, tasks, chunksize=chunksize), total=len(tasks),
                     desc=desc, disable=not progress, leave=False))
