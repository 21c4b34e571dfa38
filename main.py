# main.py
"""
Main entry point for the N-body gravity simulation.

This script is the host around the simulation core:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Selects a force solver strategy, falling back to the sequential
   solver when the parallel device is unavailable and the strategy is
   "auto".
4. Drives the frame-paced loop: sample attractor -> tick -> draw.
5. Handles clean shutdown.
"""
import argparse
import cProfile
import io
import logging
import pstats
import numpy as np

from config import SimulationConfig
from constants import FPS
from errors import DeviceUnavailable, InvalidConfiguration
from utils import setup_logging, load_config


def select_solver(strategy: str):
    """Builds the solver for `strategy`; 'auto' prefers parallel, then sequential."""
    from simulation import create_solver

    if strategy != "auto":
        return create_solver(strategy)
    try:
        return create_solver("parallel")
    except DeviceUnavailable as e:
        logging.warning(f"{e}. Falling back to the sequential solver.")
        return create_solver("sequential")


def main(argv=None):
    """
    The main function to run the simulation.
    """
    parser = argparse.ArgumentParser(description="N-body gravitational particle simulation.")
    parser.add_argument("--config", default="config.json", help="Path to the JSON configuration file.")
    parser.add_argument("--strategy", choices=["auto", "sequential", "parallel"],
                        help="Override run_control.strategy from the config file.")
    parser.add_argument("--profile", action="store_true",
                        help="Log the 20 slowest functions when the loop ends.")
    args = parser.parse_args(argv)

    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"FATAL: Could not load {args.config}. Error: {e}")
        return 1

    setup_logging(config)
    logging.info("--- N-Body Gravity Simulation Starting ---")

    run_params = config.get('run_control', {})
    strategy = args.strategy or run_params.get('strategy', 'auto')
    try:
        sim_config = SimulationConfig.from_dict(config.get('simulation', {}))
        solver = select_solver(strategy)
    except (InvalidConfiguration, DeviceUnavailable) as e:
        logging.critical(f"Cannot start simulation: {e}")
        return 1

    from simulation import Simulation
    from visualization import Visualizer

    # The visualizer decides the domain size from the window it opens.
    visualizer = Visualizer(solver_name=solver.name)
    seed = run_params.get('seed')
    rng = np.random.default_rng(seed) if seed is not None else None
    sim = Simulation(sim_config, visualizer.sim_width, visualizer.sim_height, solver=solver, rng=rng)

    log_throttle = max(1, run_params.get('log_throttle_steps', 300))
    max_steps = run_params.get('max_steps', 0)

    profiler = cProfile.Profile() if args.profile else None
    if profiler:
        profiler.enable()

    frame = 0
    running = True
    while running:
        sim.tick(visualizer.sample_attractor())
        running = visualizer.draw(sim)
        visualizer.tick(FPS)
        frame += 1

        # Hot loops must throttle logs
        if frame % log_throttle == 0:
            logging.info(f"Frame {frame} | ticks run: {sim.tick_count} | state: {sim.state.value}")
            if sim.store.count:
                avg_speed = np.mean(np.linalg.norm(sim.store.velocities, axis=1))
                logging.debug(f"Frame {frame} | Average Speed: {avg_speed:.4f}")

        if max_steps and sim.tick_count >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
            running = False

    if profiler:
        profiler.disable()
        s = io.StringIO()
        pstats.Stats(profiler, stream=s).sort_stats('cumtime').print_stats(20)
        logging.info(f"--- Performance Profile ---\n{s.getvalue()}")

    visualizer.close()
    logging.info("--- N-Body Gravity Simulation Shutting Down ---")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
