#========================================
# Windowed random search over PID gains
#========================================
import math
from contextlib import nullcontext
from multiprocessing import Pool, cpu_count

import numpy as np

from config import *
from exceptions import ConfigurationError
from trial_runner import run_trials, validate_range


class WindowedSearch:
    def __init__(self, trials=None, sims_per_trial=None, starting_window=None, shrink_factor=None,
                 top_k=None, gain_ranges=None, cfg=None, seed=None, workers=None, elitism=None,
                 verbose=None, show_progress=None):
        """
        Args:
            trials: Gain triples sampled per trial batch
            sims_per_trial: Randomized moves averaged for every gain triple
            starting_window: Initial half-width of the window around each candidate
            shrink_factor: Window multiplier applied after every generation
            top_k: Number of candidates kept each generation
            gain_ranges: [(min, max)] for kP, kI and kD
            cfg: SlideConfig for the simulated slide (horizontal if None)
            seed: Seed for the sampling generator (fresh entropy if None)
            workers: Process pool size, 1 runs everything in this process
            elitism: Keep the previous candidates in the next ranking
            verbose: Print a summary after every generation
            show_progress: Show a tqdm bar over each trial batch
        """
        # Use hyperparameters if not specified
        self.trials = trials if trials is not None else SIMS_PER_TRIAL
        self.sims_per_trial = sims_per_trial if sims_per_trial is not None else SUB_SIMULATIONS
        self.starting_window = starting_window if starting_window is not None else STARTING_WINDOW
        self.shrink_factor = shrink_factor if shrink_factor is not None else SHRINK_FACTOR
        self.top_k = top_k if top_k is not None else TOP_K
        self.elitism = elitism if elitism is not None else ELITISM
        self.verbose = verbose if verbose is not None else VERBOSE
        self.show_progress = show_progress if show_progress is not None else SHOW_PROGRESS
        self.cfg = cfg
        self.workers = workers

        ranges = list(gain_ranges if gain_ranges is not None else PID_RANGES)
        if len(ranges) != 3:
            raise ConfigurationError(f"Expected ranges for kP, kI and kD, got {ranges!r}")
        self.gain_ranges = [validate_range(name, r) for name, r in zip(('kP', 'kI', 'kD'), ranges)]
        if not (math.isfinite(self.starting_window) and self.starting_window > 0):
            raise ConfigurationError(f"starting_window must be positive, got {self.starting_window!r}")
        if not (0 < self.shrink_factor <= 1):
            raise ConfigurationError(f"shrink_factor must be in (0, 1], got {self.shrink_factor!r}")
        if not isinstance(self.top_k, int) or self.top_k < 1:
            raise ConfigurationError(f"top_k must be a positive integer, got {self.top_k!r}")

        self.rng = np.random.default_rng(seed)
        self.window = self.starting_window
        self.candidates = []
        self.generations_run = 0
        self.best_cost_history = []
        self.best_gains_history = []
        self.avg_cost_history = []
        self.window_history = []

    def rank(self, samples):
        """Sort samples by average cost and keep the top_k."""
        return sorted(samples, key=lambda s: s.average_cost)[:self.top_k]

    def narrow_ranges(self, gains, window):
        """
        Sampling ranges of +/- window around a candidate, clamped to the gain bounds.

        Both ends of the kD range are floored with the kI minimum.
        """
        (min_kp, max_kp), (min_ki, max_ki), (min_kd, max_kd) = self.gain_ranges
        kp, ki, kd = gains
        return [
            (max(kp - window, min_kp), min(kp + window, max_kp)),
            (max(ki - window, min_ki), min(ki + window, max_ki)),
            (max(kd - window, min_ki), max(min(kd + window, max_kd), min_ki)),
        ]

    def _trials(self, ranges, pool, desc):
        return run_trials(*ranges, self.trials, sims_per_trial=self.sims_per_trial, rng=self.rng,
                          pool=pool, workers=self.workers, cfg=self.cfg,
                          progress=self.show_progress, desc=desc)

    def _pool(self):
        if self.workers == 1:
            return nullcontext()
        return Pool(processes=self.workers or cpu_count())

    def _report(self, gen, generations, samples):
        best = self.candidates[0]
        avg_cost = float(np.mean([s.average_cost for s in samples]))
        self.best_cost_history.append(best.average_cost)
        self.best_gains_history.append(best.gains)
        self.avg_cost_history.append(avg_cost)
        if self.verbose:
            kp, ki, kd = best.gains
            print(f"\nGeneration {gen}/{generations}")
            print(f"Best Cost: {best.average_cost:.2f}, Avg Cost: {avg_cost:.2f}, Window: {self.window:.3f}")
            print(f"Best Gains: kP {kp:.4f} kI {ki:.4f} kD {kd:.4f}")
            print("-" * 60)

    def optimize(self, generations=None):
        """
        Run generation 0 over the full ranges, then narrow around the best
        candidates `generations` times.

        Returns:
            GainTriple with the lowest average cost of the final ranking
        """
        generations = generations if generations is not None else GENERATIONS
        if not isinstance(generations, int) or generations < 0:
            raise ConfigurationError(f"generations must be a non-negative integer, got {generations!r}")

        self.window = self.starting_window
        self.best_cost_history = []
        self.best_gains_history = []
        self.avg_cost_history = []
        self.window_history = []

        with self._pool() as pool:
            samples = self._trials(self.gain_ranges, pool, "Generation 0")
            self.candidates = self.rank(samples)
            self.generations_run = 0
            self._report(0, generations, samples)

            for gen in range(1, generations + 1):
                self.window_history.append(self.window)
                samples = list(self.candidates) if self.elitism else []
                for idx, candidate in enumerate(self.candidates):
                    ranges = self.narrow_ranges(candidate.gains, self.window)
                    samples.extend(self._trials(ranges, pool, f"Generation {gen} [{idx + 1}/{len(self.candidates)}]"))

                self.candidates = self.rank(samples)
                self.window *= self.shrink_factor
                self.generations_run = gen
                self._report(gen, generations, samples)

        return self.best.gains

    @property
    def best(self):
        return self.candidates[0]
