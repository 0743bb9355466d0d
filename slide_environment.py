import math
from collections import namedtuple
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config import (DEADBAND, DT, MAX_STEPS, OVERSHOOT_PENALTY, SETTLE_HOLD_TIME,
                    SETTLING_TIME_PENALTY, STABLE_TIME, STEADY_STATE_PENALTY)
from exceptions import ConfigurationError
from PIDController import PIDController
from slide_drive import SlideConfig, SlideDrive

GainTriple = namedtuple('GainTriple', ['kp', 'ki', 'kd'])

TRAJECTORY_KEYS = ('time', 'position', 'error', 'target', 'velocity', 'output', 'p', 'i', 'd',
                   'settling', 'stable')


def calculate_cost(overshoot, settling_time, error,
                   penalties=(OVERSHOOT_PENALTY, SETTLING_TIME_PENALTY, STEADY_STATE_PENALTY)):
    """
    Weighted penalty for one simulation step.

    Overshoot and steady state error are already 0 inside the deadband, so
    anything less than 1cm has no effect.
    """
    overshoot_penalty, settling_time_penalty, steady_state_penalty = penalties
    return (overshoot * overshoot_penalty) + \
        (settling_time * settling_time_penalty) + \
        (error * steady_state_penalty)


class StabilityTracker:
    """
    Deadband timer for one run: Unstable -> entering tolerance -> Stable.

    Any step outside the deadband drops the tracker back to Unstable, even
    after Stable was reached.
    """

    def __init__(self, deadband=DEADBAND, stable_time=STABLE_TIME, hold_time=SETTLE_HOLD_TIME):
        self.deadband = deadband
        self.required_time = stable_time
        self.hold_time = hold_time

        self.tolerance_start = None  # time the error entered the deadband
        self.stable = False
        self.stable_time = 0.0

    def settling_term(self, time):
        """Time since the run started, frozen once the slide is stable."""
        return self.stable_time if self.stable else time

    def update(self, error, time):
        """Advance the timer. Returns True once the run may stop."""
        if abs(error) < self.deadband:
            if not self.stable:
                if self.tolerance_start is None:
                    self.tolerance_start = time  # first time in tolerance
                if time - self.tolerance_start >= self.required_time:
                    self.stable = True
                    self.stable_time = time
        else:
            # reset if error drifts out again
            self.tolerance_start = None
            self.stable = False

        return self.stable and (time - self.stable_time >= self.hold_time)


@dataclass
class SimulationResults:
    total_cost: float
    steps: int
    stable: bool
    final_position: float
    trajectory: Optional[Dict[str, List[float]]] = field(default=None, repr=False)


class SlideEnvironment:
    """Closed loop simulation of a PID controlled slide, scored by a penalty cost."""

    def __init__(self, gains, cfg=None, dt=DT, max_steps=MAX_STEPS,
                 penalties=(OVERSHOOT_PENALTY, SETTLING_TIME_PENALTY, STEADY_STATE_PENALTY)):
        """
        Args:
            gains: (kp, ki, kd)
            cfg: SlideConfig, horizontal slide if None
            dt: Time step for simulation (seconds)
            max_steps: Step ceiling for one run
            penalties: Weights for overshoot, settling time and steady state error
        """
        self.gains = GainTriple(*(float(g) for g in gains))
        if not all(math.isfinite(g) for g in self.gains):
            raise ConfigurationError(f"Gains must be finite, got {self.gains}")
        self.cfg = cfg if cfg is not None else SlideConfig.horizontal()
        self.dt = dt
        self.max_steps = max_steps
        self.penalties = penalties
        self.slide = SlideDrive(self.cfg)

    def run_simulation(self, starting_position, target_position, debug=False, record=False):
        """
        Simulate one move from starting_position to target_position.

        The run stops early once the error has stayed inside the deadband for
        STABLE_TIME and another SETTLE_HOLD_TIME has passed. Otherwise it runs
        all max_steps.

        Args:
            starting_position: Initial carriage position (m)
            target_position: Setpoint (m)
            debug: Print the state at every step
            record: Keep the per-step trajectory in the results

        Returns:
            SimulationResults
        """
        if not (math.isfinite(starting_position) and math.isfinite(target_position)):
            raise ConfigurationError(
                f"Positions must be finite, got start={starting_position}, target={target_position}")

        dt = self.dt
        pid = PIDController(*self.gains)
        slide = self.slide
        slide.reset(starting_position)
        tracker = StabilityTracker()

        trajectory = {key: [] for key in TRAJECTORY_KEYS} if record else None
        total_cost = 0.0

        steps = 0
        for step in range(self.max_steps):
            time = step * dt
            steps = step + 1

            # PID Control
            error = target_position - slide.position  # m
            output = pid.update(error, dt)

            slide.update(output, dt)

            position = slide.position
            overshoot = position - target_position if position - target_position > DEADBAND else 0.0
            settling_time = tracker.settling_term(time)
            cost_error = error if error > DEADBAND else 0.0
            total_cost += calculate_cost(overshoot, settling_time, cost_error, self.penalties)

            if debug:
                state = (f"t={time:.2f} s, pos={position:.3f}, output={output:.3f}, "
                         f"accel = {slide.acceleration:.3f} m/s^2, vel={slide.velocity:.3f}, err={error:.3f}")

            # Hardware limitation
            hit = slide.apply_hardstop()
            if debug:
                print(f"{'Hardstop Hit:' if hit else '':<14}{state}")

            done = tracker.update(error, time)

            if record:
                p_term, i_term, d_term = pid.terms(error)
                trajectory['time'].append(time)
                trajectory['position'].append(slide.position)
                trajectory['error'].append(error)
                trajectory['target'].append(target_position)
                trajectory['velocity'].append(slide.velocity)
                trajectory['output'].append(output)
                trajectory['p'].append(p_term)
                trajectory['i'].append(i_term)
                trajectory['d'].append(d_term)
                trajectory['settling'].append(settling_time)
                trajectory['stable'].append(tracker.stable)

            if done:
                if debug:
                    print(f"Simulation complete at t={time:.2f}s")
                break

        return SimulationResults(total_cost=total_cost, steps=steps, stable=tracker.stable,
                                 final_position=slide.position, trajectory=trajectory)


def simulate(gains, starting_position, target_position, cfg=None, record=False):
    """Run one simulation and return its SimulationResults."""
    return SlideEnvironment(gains, cfg).run_simulation(starting_position, target_position, record=record)
