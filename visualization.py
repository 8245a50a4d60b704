# visualization.py
"""
Handles the visualization of the field and particles using Pygame.

The Visualizer is the simulation's input and rendering collaborator: it
reports the pointer position (the field's reference point) and the frame
duration, and draws the field overlay and the particle snapshot.
"""
import logging
import math
import pygame
import numpy as np
from typing import Optional, Tuple

from config import SimulationConfig
from field import sample_field_grid
from particle import ParticleSystem
from vectors import normalize
from constants import (
    BACKGROUND_COLOR, DEFAULT_FIELD_GRID_HEIGHT, DEFAULT_FIELD_GRID_WIDTH,
    DEFAULT_PARTICLE_COLOR, DEFAULT_PARTICLE_RADIUS, FIELD_ARROW_ANGLE,
    FIELD_ARROW_SIZE, FIELD_COLOR, FIELD_VECTOR_LENGTH, FPS, FPS_TEXT_COLOR,
    FULLSCREEN, TEXT_COLOR, UI_BACKGROUND_ALPHA, WINDOW_HEIGHT, WINDOW_TITLE,
    WINDOW_WIDTH
)

# --- Data Contracts ---
#
# field_grid_dimensions(vis_params: dict) -> Tuple[int, int]:
#   - Outputs: (field_grid_width, field_grid_height), defaulting to the
#     constants when absent.
#   - Side Effects: Logs CRITICAL and raises ValueError unless both are
#     positive integers. Needs no display, so it can run before pygame
#     starts.
#
# class Visualizer:
#   - __init__(self, config: SimulationConfig, vis_params: Optional[dict] = None):
#     - Inputs:
#       - config: The simulation configuration, shown in the parameter panel
#         and used to sample the field overlay.
#       - vis_params: The "visualization" section of config.json.
#         - "field_grid_width": int
#         - "field_grid_height": int
#         - "show_field": bool
#         - "particle_color": [r, g, b]
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - reference_point(self) -> Tuple[float, float]:
#     - Outputs: The pointer position in screen coordinates.
#
#   - tick(self) -> float:
#     - Outputs: Seconds since the previous tick, 0.0 while paused.
#     - Side Effects: Limits the frame rate to FPS.
#
#   - draw(self, particles: ParticleSystem) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: Handles Pygame events and renders one frame. R
#       re-seeds the particles; SPACE pauses; F toggles the field overlay.


def field_grid_dimensions(vis_params: dict) -> Tuple[int, int]:
    """Reads and validates the arrow grid size of the field overlay."""
    dimensions = (
        vis_params.get('field_grid_width', DEFAULT_FIELD_GRID_WIDTH),
        vis_params.get('field_grid_height', DEFAULT_FIELD_GRID_HEIGHT),
    )
    for value in dimensions:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            msg = (
                f"Configuration error: field grid must be positive integers, "
                f"got {dimensions[0]!r}x{dimensions[1]!r}."
            )
            logging.critical(msg)
            raise ValueError(msg)
    return dimensions


class Visualizer:
    """
    Renders the field and particles and supplies per-frame input.
    """
    def __init__(self, config: SimulationConfig, vis_params: Optional[dict] = None):
        """
        Initializes Pygame and the display window.
        """
        vis_params = vis_params if vis_params is not None else {}
        grid_width, grid_height = field_grid_dimensions(vis_params)

        pygame.init()
        pygame.font.init()

        if FULLSCREEN:
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = WINDOW_WIDTH, WINDOW_HEIGHT
            self.screen = pygame.display.set_mode((width, height))

        self.sim_width = width
        self.sim_height = height
        self.config = config

        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()

        # --- Field Overlay Configuration ---
        # Arrow spacing in pixels, so the grid always spans the whole display.
        self.spacing_x = width / grid_width
        self.spacing_y = height / grid_height
        self.show_field = bool(vis_params.get('show_field', True))
        self.paused = False

        self.particle_color = self._initialize_color(vis_params.get('particle_color'))

        try:
            self.font_title = pygame.font.SysFont(None, 28)
            self.font_main = pygame.font.SysFont(None, 20)
        except pygame.error:
            logging.warning("System font not available, falling back to the default font.")
            self.font_title = pygame.font.Font(None, 28)
            self.font_main = pygame.font.Font(None, 20)

        self.panel_padding = 6
        self.text_color_key = (110, 110, 110)
        self.text_color_value = TEXT_COLOR

        logging.info(
            f"Visualizer initialized with Pygame display ({width}x{height}), "
            f"field grid {grid_width}x{grid_height}."
        )

    def _initialize_color(self, config_color: Optional[list]) -> pygame.Color:
        """Loads the particle color from config, falling back to the default."""
        if not config_color:
            return pygame.Color(DEFAULT_PARTICLE_COLOR)
        try:
            return pygame.Color(*config_color)
        except (ValueError, TypeError) as e:
            logging.error(f"Could not parse particle color from config: {e}. Using default.")
            return pygame.Color(DEFAULT_PARTICLE_COLOR)

    def reference_point(self) -> Tuple[float, float]:
        x, y = pygame.mouse.get_pos()
        return float(x), float(y)

    def tick(self) -> float:
        """
        Waits for the next frame and returns the elapsed time in seconds.
        """
        elapsed_ms = self.clock.tick(FPS)
        if self.paused:
            return 0.0
        return elapsed_ms / 1000.0

    def _handle_events(self, particles: ParticleSystem) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                    logging.info(f"Simulation {'paused' if self.paused else 'resumed'} by user.")
                elif event.key == pygame.K_f:
                    self.show_field = not self.show_field
                    logging.info(f"Field overlay {'shown' if self.show_field else 'hidden'}.")
                elif event.key == pygame.K_r:
                    particles.reset()
                    logging.info("Particles re-seeded by user.")
        return True

    def _draw_vector(self, position: np.ndarray, direction: np.ndarray) -> None:
        """Draws a fixed-length arrow from position along direction."""
        end_x = position[0] + direction[0] * FIELD_VECTOR_LENGTH
        end_y = position[1] + direction[1] * FIELD_VECTOR_LENGTH
        start_pos = (position[0], position[1])
        end_pos = (end_x, end_y)
        pygame.draw.line(self.screen, FIELD_COLOR, start_pos, end_pos)

        # Two strokes swept back from the tip form the arrowhead.
        angle = math.atan2(direction[1], direction[0])
        for offset in (-FIELD_ARROW_ANGLE, FIELD_ARROW_ANGLE):
            wing = (
                end_x - FIELD_ARROW_SIZE * math.cos(angle + offset),
                end_y - FIELD_ARROW_SIZE * math.sin(angle + offset),
            )
            pygame.draw.line(self.screen, FIELD_COLOR, wing, end_pos)

    def _draw_field(self, reference_point: Tuple[float, float]) -> None:
        points, vectors = sample_field_grid(
            self.sim_width, self.sim_height,
            self.spacing_x, self.spacing_y,
            reference_point, self.config
        )
        directions = normalize(vectors)
        for position, direction in zip(points, directions):
            # A zero field has no direction to draw.
            if direction[0] == 0.0 and direction[1] == 0.0:
                continue
            self._draw_vector(position, direction)

    def _draw_particles(self, particles: ParticleSystem) -> None:
        positions, _ = particles.snapshot()
        for pos in positions:
            pygame.draw.circle(
                self.screen,
                self.particle_color,
                (int(pos[0]), int(pos[1])),
                DEFAULT_PARTICLE_RADIUS
            )

    def _draw_hud(self, particles: ParticleSystem) -> None:
        """Renders the title, FPS counter and the simulation parameters."""
        title_surf = self.font_title.render("Vector Field Visualization", True, TEXT_COLOR)
        self.screen.blit(title_surf, (10, 10))

        fps_surf = self.font_main.render(f"{self.clock.get_fps():.0f} FPS", True, FPS_TEXT_COLOR)
        self.screen.blit(fps_surf, (30, 40))

        # --- Parameter panel in the top-right corner ---
        entries = list(self.config.as_dict().items())
        entries.append(("average_speed", particles.average_speed()))
        if self.paused:
            entries.append(("state", "paused"))

        lines = []
        for key, value in entries:
            display_key = key.replace('_', ' ').title()
            if isinstance(value, float):
                display_value = f"{value:.4g}"
            else:
                display_value = str(value)
            lines.append((
                self.font_main.render(display_key, True, self.text_color_key),
                self.font_main.render(display_value, True, self.text_color_value),
            ))

        line_height = self.font_main.get_linesize()
        key_width = max(k.get_width() for k, _ in lines)
        value_width = max(v.get_width() for _, v in lines)
        panel_width = key_width + value_width + self.panel_padding * 3
        panel_height = line_height * len(lines) + self.panel_padding * 2
        panel_x = self.sim_width - panel_width - 10

        panel = pygame.Surface((panel_width, panel_height), pygame.SRCALPHA)
        panel.fill((255, 255, 255, UI_BACKGROUND_ALPHA))
        self.screen.blit(panel, (panel_x, 10))

        y = 10 + self.panel_padding
        for key_surf, value_surf in lines:
            self.screen.blit(key_surf, (panel_x + self.panel_padding, y))
            self.screen.blit(value_surf, (panel_x + key_width + self.panel_padding * 2, y))
            y += line_height

    def draw(self, particles: ParticleSystem) -> bool:
        """
        Handles events and draws the field, particles and HUD.

        Returns:
            bool: False if the simulation should exit, True otherwise.
        """
        if not self._handle_events(particles):
            return False

        self.screen.fill(BACKGROUND_COLOR)
        if self.show_field:
            self._draw_field(self.reference_point())
        self._draw_particles(particles)
        self._draw_hud(particles)

        pygame.display.flip()
        return True

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
