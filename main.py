import argparse
import sys

from config import GENERATIONS
from slide_drive import SlideConfig
from slide_environment import SlideEnvironment
from Windowed_Search import WindowedSearch

COMMANDS = ('horizontalSlide', 'verticalSlide', 'autoTuneHorizontalSlide')


def print_trajectory(results, every=10):
    """Print every n-th step of a recorded trajectory."""
    traj = results.trajectory
    print(f"{'Time':<8} {'Pos':<10} {'Err':<10} {'Vel':<10} {'Out':<10} {'P':<10} {'I':<10} {'D':<10}")
    print("-" * 80)
    for idx in range(0, len(traj['time']), every):
        print(f"{traj['time'][idx]:<8.2f} {traj['position'][idx]:<10.3f} {traj['error'][idx]:<10.3f} "
              f"{traj['velocity'][idx]:<10.3f} {traj['output'][idx]:<10.3f} {traj['p'][idx]:<10.3f} "
              f"{traj['i'][idx]:<10.3f} {traj['d'][idx]:<10.3f}")
    print(f"\nTotal cost: {results.total_cost:.2f} after {results.steps} steps "
          f"({'stable' if results.stable else 'not stable'}), final position {results.final_position:.3f} m")


def send_help_message():
    print("This application requires at least one argument. Pick from the following")
    for command in COMMANDS:
        print(f"  - {command}")


def build_parser():
    parser = argparse.ArgumentParser(description="Linear slide PID simulator and auto-tuner")
    parser.add_argument('command', nargs='?', help="One of: " + ", ".join(COMMANDS))
    parser.add_argument('--generations', type=int, default=GENERATIONS,
                        help="Narrowing generations for autoTuneHorizontalSlide")
    parser.add_argument('--trials', type=int, default=None, help="Gain triples sampled per trial batch")
    parser.add_argument('--sims', type=int, default=None, help="Randomized moves averaged per gain triple")
    parser.add_argument('--seed', type=int, default=None, help="Seed for reproducible tuning")
    parser.add_argument('--workers', type=int, default=None, help="Worker processes (1 = in-process)")
    parser.add_argument('--quiet', action='store_true', help="Hide per-step and per-generation output")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    debug = not args.quiet

    if args.command == 'horizontalSlide':
        env = SlideEnvironment((10.0, 0.0, 0.5), SlideConfig.horizontal())
        results = env.run_simulation(0.100, 0.220, debug=debug, record=True)
    elif args.command == 'verticalSlide':
        env = SlideEnvironment((10.0, 0.0, 0.5), SlideConfig.vertical())
        results = env.run_simulation(0.100, 0.220, debug=debug, record=True)
    elif args.command == 'autoTuneHorizontalSlide':
        tuner = WindowedSearch(trials=args.trials, sims_per_trial=args.sims, seed=args.seed, workers=args.workers,
                               verbose=not args.quiet, show_progress=not args.quiet)
        kp, ki, kd = tuner.optimize(args.generations)
        print(f"Best values were found: kP {kp} kI {ki} kD {kd}")
        env = SlideEnvironment((kp, ki, kd), SlideConfig.horizontal())
        results = env.run_simulation(0.100, 0.200, debug=debug, record=True)
    else:
        send_help_message()
        return 1

    print_trajectory(results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
