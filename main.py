# main.py
"""
Main entry point for the vector field simulation.

This script orchestrates the entire simulation lifecycle:
1. Loads configuration from `config.json` (or the path given as the first
   command-line argument).
2. Initializes the logging system.
3. Opens the display and seeds the particles.
4. Runs the frame loop: pointer position and frame time in, particle
   update, then drawing.
5. Handles clean shutdown.
"""
import logging
import sys
import cProfile
import pstats
import io

from utils import setup_logging, load_config, get_section, get_run_control

DEFAULT_CONFIG_PATH = 'config.json'


def main(argv=None):
    """
    The main function to run the simulation.
    """
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else DEFAULT_CONFIG_PATH

    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return 1

    setup_logging(config)

    logging.info("--- Vector Field Simulation Starting ---")

    # Imported after logging is configured so module-level setup is logged.
    from config import SimulationConfig
    from particle import ParticleSystem
    from visualization import Visualizer, field_grid_dimensions

    try:
        sim_config = SimulationConfig.from_params(get_section(config, 'simulation_parameters'))
        run_params = get_run_control(config)
        vis_params = get_section(config, 'visualization')
        field_grid_dimensions(vis_params)
    except ValueError:
        logging.critical("Invalid configuration. Aborting.")
        return 1

    # --- Component Initialization ---
    # The visualizer decides the display size, and the particles are
    # scattered over it.
    visualizer = Visualizer(sim_config, vis_params)
    particles = ParticleSystem(sim_config, visualizer.sim_width, visualizer.sim_height)

    profiler = cProfile.Profile()

    log_throttle = run_params['log_throttle_steps']
    # None runs until the window is closed.
    max_steps = run_params['max_steps']

    running = True
    step_num = 0

    profiler.enable()
    while running:
        delta_time = visualizer.tick()
        particles.step(visualizer.reference_point(), delta_time)
        step_num += 1

        if not visualizer.draw(particles):
            running = False

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Simulation step {step_num}")
            logging.debug(f"Step {step_num} | Average Speed: {particles.average_speed():.4f}")

        if max_steps is not None and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
            running = False
    profiler.disable()

    visualizer.close()
    logging.info("Simulation loop finished.")

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    # Sort by cumulative time spent in the function
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Vector Field Simulation Shutting Down ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())
