# main.py
"""
Main entry point for the Particle Life simulation.

This script orchestrates the entire simulation lifecycle:
1. Loads configuration from `config.json` (or the path given on the command line).
2. Initializes the logging system.
3. Validates the configuration and sets up the particles and rule table.
4. Runs the main simulation loop, one tick per rendered frame.
5. Handles clean shutdown.
"""
import logging
import sys
from utils import setup_logging, load_config, ConfigurationError
import cProfile
import pstats
import io

def main(config_path: str = 'config.json') -> int:
    """
    The main function to run the simulation.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return 1

    setup_logging(config)

    logging.info("--- Particle Life Simulation Starting ---")

    sim_params = config.get('simulation_parameters', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from simulation import create_simulation

    # --- Component Initialization ---
    try:
        sim = create_simulation(sim_params)
    except ConfigurationError:
        logging.critical("Aborting: the simulation could not be configured.")
        return 1

    headless = run_params.get('headless', False)
    visualizer = None
    if not headless:
        from visualization import Visualizer
        particles = sim.particles
        visualizer = Visualizer(
            group_names=particles.group_names,
            half_extent=particles.half_extent,
            dimensions=particles.dimensions,
            colors=vis_params.get('group_colors'),
            window_size=tuple(vis_params['window_size']) if 'window_size' in vis_params else None,
        )

    profiler = cProfile.Profile() if run_params.get('profile', True) else None

    run(sim, visualizer, profiler, run_params)
    logging.info("Simulation loop finished.")

    if profiler:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Life Simulation Shutting Down ---")
    return 0


def run(sim, visualizer, profiler, run_params: dict) -> int:
    """
    Ticks the simulation until max_steps or until the user quits.

    The profiler is stopped and the window closed even if a tick or a
    frame raises. Returns the number of ticks run.
    """
    log_throttle = run_params.get('log_throttle_steps', 100)
    max_steps = run_params.get('max_steps', 5000)

    running = True
    step_num = 0

    if profiler:
        profiler.enable()
    try:
        while running:
            sim.tick()
            step_num += 1

            # The visualizer returns False if the user quits.
            if visualizer is not None and not visualizer.draw(sim):
                running = False

            # Hot loops must throttle logs
            if step_num % log_throttle == 0:
                logging.info(f"Simulation step {step_num}/{max_steps}")
                logging.debug(f"Step {step_num} | Average Speed: {sim.average_speed():.4f}")

            if max_steps and step_num >= max_steps:
                logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
                running = False
    finally:
        if profiler:
            profiler.disable()
        if visualizer is not None:
            visualizer.close()
    return step_num


def cli() -> None:
    sys.exit(main(*sys.argv[1:2]))


if __name__ == "__main__":
    cli()
