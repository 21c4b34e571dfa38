# visualization.py
"""
Renders the particle simulation and handles host input using Pygame.

The Visualizer is a consumer of the simulation core: it reads the
particle store through its read-only views, samples the mouse as the
attractor input once per frame, and turns keyboard input into new
configuration values passed to ``Simulation.apply_config``.
"""
import logging
import pygame

from constants import (
    BACKGROUND_COLOR, DRAW_RADIUS_SCALE, FULLSCREEN, MIN_TRAIL_FADE,
    PARTICLE_HALO_ALPHA, PARTICLE_HALO_RATIO, UI_BACKGROUND_ALPHA,
    UI_PANEL_WIDTH, WINDOW_HEIGHT, WINDOW_WIDTH
)
from physics import Attractor

# Forward reference for type hinting to avoid circular import
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from simulation import Simulation


# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self):
#     - Side Effects: Initializes Pygame and creates a display surface.
#       self.sim_width / self.sim_height give the simulation domain size.
#
#   - sample_attractor(self) -> Attractor:
#     - Outputs: current mouse position; active while the cursor is over
#       the simulation area and the window has focus.
#
#   - draw(self, simulation: "Simulation") -> bool:
#     - Outputs:
#       - bool: False if the user has quit, True otherwise.
#     - Side Effects: Renders particles and the parameter panel, handles
#       Pygame events and may call simulation.apply_config / reset /
#       resize_domain.

KEY_HELP = [
    ("Space", "Pause / resume"),
    ("R", "Reset particles"),
    ("P", "Next palette"),
    ("T", "Toggle trails"),
    ("Up / Down", "G +/- 0.05"),
    ("Left / Right", "Particles -/+ 10"),
    ("[ / ]", "Mouse strength -/+ 500"),
    ("Esc", "Quit"),
]


def trail_fade_alpha(trail_length: int) -> int:
    """Per-frame fade of the trail surface (0-255); longer trails fade slower."""
    opacity = max(MIN_TRAIL_FADE, 1.0 / (trail_length * 1.2 + 1.0))
    return int(round(opacity * 255))


class Visualizer:
    """
    Renders the particle store and provides keyboard/mouse controls.
    """
    def __init__(self, solver_name: str = ""):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()
        pygame.font.init()

        if FULLSCREEN:
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = WINDOW_WIDTH + UI_PANEL_WIDTH, WINDOW_HEIGHT
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        pygame.display.set_caption("N-Body Gravitational Engine")
        self.clock = pygame.time.Clock()
        self.solver_name = solver_name
        self._create_surfaces(width, height)

        try:
            self.font_title = pygame.font.SysFont("Segoe UI", 16, bold=True)
            self.font_main = pygame.font.SysFont("Segoe UI", 14)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_title = pygame.font.SysFont(None, 20, bold=True)
            self.font_main = pygame.font.SysFont(None, 18)

        self.text_color_title = (255, 255, 255)
        self.text_color_key = (200, 200, 200)
        self.text_color_value = (255, 255, 255)

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def _create_surfaces(self, width: int, height: int) -> None:
        # The simulation area is the total width minus the UI panel
        self.sim_width = max(1, width - UI_PANEL_WIDTH)
        self.sim_height = max(1, height)
        self.sim_surface = pygame.Surface((self.sim_width, self.sim_height))
        self.sim_surface.fill(BACKGROUND_COLOR)
        self.fade_surface = pygame.Surface((self.sim_width, self.sim_height), pygame.SRCALPHA)
        self.ui_panel_surface = pygame.Surface((UI_PANEL_WIDTH, self.sim_height), pygame.SRCALPHA)
        self.ui_panel_surface.fill((40, 40, 40, UI_BACKGROUND_ALPHA))

    def sample_attractor(self) -> Attractor:
        x, y = pygame.mouse.get_pos()
        active = pygame.mouse.get_focused() and x < self.sim_width
        return Attractor(float(x), float(y), bool(active))

    def _handle_key(self, key: int, simulation: "Simulation") -> None:
        config = simulation.config
        if key == pygame.K_SPACE:
            simulation.toggle_pause()
        elif key == pygame.K_r:
            simulation.reset()
        elif key == pygame.K_p:
            simulation.apply_config(config.with_changes(palette=config.palette.next()))
        elif key == pygame.K_t:
            simulation.apply_config(config.with_changes(show_trails=not config.show_trails))
        elif key in (pygame.K_UP, pygame.K_DOWN):
            step = 0.05 if key == pygame.K_UP else -0.05
            g = min(5.0, max(0.0, round(config.g + step, 2)))
            simulation.apply_config(config.with_changes(g=g))
            logging.info(f"G set to {g:.2f} by user.")
        elif key in (pygame.K_LEFT, pygame.K_RIGHT):
            step = 10 if key == pygame.K_RIGHT else -10
            count = min(500, max(1, config.particle_count + step))
            simulation.apply_config(config.with_changes(particle_count=count))
        elif key in (pygame.K_LEFTBRACKET, pygame.K_RIGHTBRACKET):
            step = 500.0 if key == pygame.K_RIGHTBRACKET else -500.0
            strength = min(50000.0, max(-10000.0, config.mouse_strength + step))
            simulation.apply_config(config.with_changes(mouse_strength=strength))
            logging.info(f"Mouse strength set to {strength:.0f} by user.")

    def _draw_particles(self, simulation: "Simulation") -> None:
        store = simulation.store
        positions = store.position_view
        colors = store.color_view
        radii = store.radii

        for i in range(store.count):
            r, g, b, _ = colors[i]
            color = (int(r * 255), int(g * 255), int(b * 255))
            center = (int(positions[i, 0]), int(positions[i, 1]))
            radius = max(1, int(radii[i] * DRAW_RADIUS_SCALE))

            halo_radius = radius * PARTICLE_HALO_RATIO
            halo = pygame.Surface((halo_radius * 2, halo_radius * 2), pygame.SRCALPHA)
            pygame.draw.circle(halo, (*color, PARTICLE_HALO_ALPHA), (halo_radius, halo_radius), halo_radius)
            self.sim_surface.blit(halo, (center[0] - halo_radius, center[1] - halo_radius))

            pygame.draw.circle(self.sim_surface, color, center, radius)
            pygame.draw.circle(self.sim_surface, (255, 255, 255), center, max(1, int(radius * 0.6)))

    def _draw_panel(self, simulation: "Simulation") -> None:
        config = simulation.config
        rows = [
            ("Solver", self.solver_name or simulation.solver.name),
            ("State", simulation.state.value),
            ("Particles", str(simulation.store.count)),
            ("G", f"{config.g:.2f}"),
            ("Friction", f"{config.friction * 100:.1f}%"),
            ("Elasticity", f"{config.collision_elasticity:.2f}"),
            ("Mouse Strength", f"{config.mouse_strength:.0f}"),
            ("Palette", config.palette.value),
            ("Trails", str(config.trail_length) if config.show_trails else "off"),
            ("FPS", f"{self.clock.get_fps():.0f}"),
        ]

        self.screen.blit(self.ui_panel_surface, (self.sim_width, 0))
        x = self.sim_width + 20
        y = 15
        title = self.font_title.render("Simulation", True, self.text_color_title)
        self.screen.blit(title, (x, y))
        y += title.get_height() + 10

        line_height = self.font_main.get_linesize()
        for key, value in rows + [("", "")] + KEY_HELP:
            key_surf = self.font_main.render(key, True, self.text_color_key)
            value_surf = self.font_main.render(value, True, self.text_color_value)
            self.screen.blit(key_surf, (x, y))
            self.screen.blit(value_surf, (x + 130, y))
            y += line_height

    def draw(self, simulation: "Simulation") -> bool:
        """
        Draws all particles and UI, and handles events.

        Returns:
            bool: False if the simulation should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                self._handle_key(event.key, simulation)
            if event.type == pygame.VIDEORESIZE and not FULLSCREEN:
                self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self._create_surfaces(event.w, event.h)
                simulation.resize_domain(self.sim_width, self.sim_height)

        config = simulation.config
        if config.show_trails:
            self.fade_surface.fill((*BACKGROUND_COLOR, trail_fade_alpha(config.trail_length)))
            self.sim_surface.blit(self.fade_surface, (0, 0))
        else:
            self.sim_surface.fill(BACKGROUND_COLOR)

        self._draw_particles(simulation)
        self.screen.blit(self.sim_surface, (0, 0))
        self._draw_panel(simulation)

        pygame.display.flip()
        return True

    def tick(self, fps: int) -> None:
        """Paces the driving loop to at most ``fps`` frames per second."""
        self.clock.tick(fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
