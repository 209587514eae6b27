# lattice_reach/app/viewer.py
#!/usr/bin/env python3
"""
Lattice Reach Viewer: the reachable diamond over a window of repeated tiles

- Keyboard:
    [1]..[9]     -> switch map (files in maps/)
    [+]/[-]      -> steps +2 / -2 (hold SHIFT for a whole tile side)
    [SPACE]      -> grow / pause
    [R]          -> reset steps to 0
    [Q]/[ESC]    -> quit

Config:
- ENV: LATTICE_REACH_STRATEGY, LATTICE_REACH_DIRECT_LIMIT
- CLI: --strategy=..., --direct-limit=..., --lattice-limit=...,
       --tiles=<window radius in tiles>, --maps=<directory of .txt tiles>
"""

# --- bootstrap import path so `from lattice_reach...` works when run as a script ---
import sys, time
from pathlib import Path
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))
# -----------------------------------------------------------------------------------

from typing import Dict, List, Optional, Set
import pygame
from loguru import logger

from lattice_reach.core.config import SolveConfig, resolve_config
from lattice_reach.core.direct_solver import reachable_cells
from lattice_reach.core.errors import LatticeReachError
from lattice_reach.core.lattice_explorer import LatticeExplorer
from lattice_reach.core.parsing import load_grid
from lattice_reach.core.solver import solve_with_report
from lattice_reach.core.types import Coord, GridModel, SolveReport

# ---------- Config ----------
MAP_DIR = _REPO_ROOT / "maps"
PANEL_W = 360            # right band: metrics + buttons
GRID_MARGIN = 16
FONT_NAME = None  # default pygame font


def resolve_window_tiles(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv if argv is None else argv
    radius = 2
    for arg in argv:
        if arg.startswith("--tiles="):
            radius = max(0, int(arg.split("=", 1)[1]))
    return radius


def resolve_map_dir(argv: Optional[List[str]] = None) -> Path:
    argv = sys.argv if argv is None else argv
    map_dir = MAP_DIR
    for arg in argv:
        if arg.startswith("--maps="):
            map_dir = Path(arg.split("=", 1)[1]).expanduser()
    return map_dir


def discover_maps(map_dir: Path = MAP_DIR) -> Dict[str, Path]:
    return {p.stem: p for p in sorted(map_dir.glob("*.txt"))}


# Colors
BLUE        = ( 70,130,180)
ROCK        = ( 52, 56, 66)
FLOOR_A     = (200,200,200)
FLOOR_B     = (184,188,194)
NEON_CYAN_A = (0,150,255,140)
TILE_EDGE   = (255,210,0)

CARD_BG     = (24,28,36,220)
CARD_HI     = (255,255,255,18)
TEXT_LIGHT  = (230,235,240)
ACCENT_GOLD = (255,210,0)
BACKDROP    = (28,31,38)
BTN_IDLE    = (36,40,48)
BTN_HOVER   = (46,50,60)
BTN_ACTIVE  = (58,86,160)


def window_overlay(grid: GridModel, steps: int, radius: int) -> Set[Coord]:
    """Reachable cells (absolute coords) inside the (2r+1)^2 tile window."""
    if not grid.open_border():
        return reachable_cells(grid, steps)
    explorer = LatticeExplorer(grid, steps, name="Viewer.lattice")
    explorer.run()
    out: Set[Coord] = set()
    for t in explorer.results:
        if abs(t[0]) <= radius and abs(t[1]) <= radius:
            out |= explorer.reachable_cells(t)
    return out


def window_step_cap(grid: GridModel, radius: int) -> int:
    """Largest budget whose diamond still fits the window around the start."""
    sx, sy = grid.start
    return min(sx + radius * grid.width, grid.width - 1 - sx + radius * grid.width,
               sy + radius * grid.height, grid.height - 1 - sy + radius * grid.height)


# ---------- Simple UI Button ----------
class UIButton:
    def __init__(self, label: str, rect: pygame.Rect, callback, *, togglable: bool = False):
        self.label = label
        self.rect = rect
        self.callback = callback
        self.hover = False
        self.togglable = togglable
        self.active = False

    def set_active(self, value: bool):
        self.active = bool(value)

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        if self.active and self.togglable:
            bg = BTN_ACTIVE
        else:
            bg = BTN_HOVER if self.hover else BTN_IDLE
        pygame.draw.rect(screen, bg, self.rect, border_radius=10)
        text = font.render(self.label, True, TEXT_LIGHT)
        screen.blit(text, text.get_rect(center=self.rect.center))

    def handle_mouse(self, event: pygame.event.Event):
        if event.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.callback()


# ---------- Viewer ----------
class Viewer:
    def __init__(self, maps: Dict[str, Path], config: SolveConfig, radius: int = 2):
        pygame.init()

        self.maps = maps
        self.config = config
        self.radius = radius
        self.selected_map_key = next(iter(maps))
        self.grid = load_grid(maps[self.selected_map_key])

        self.font = pygame.font.Font(FONT_NAME, 18)
        self.font_big = pygame.font.Font(FONT_NAME, 22)

        span_w = (2 * radius + 1) * self.grid.width
        span_h = (2 * radius + 1) * self.grid.height
        cs = max(2, min(16, 720 // max(span_w, span_h)))
        win_w = GRID_MARGIN * 2 + span_w * cs + PANEL_W
        win_h = max(GRID_MARGIN * 2 + span_h * cs, 560)
        self.screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
        pygame.display.set_caption(f"Lattice Reach — {self.selected_map_key}")

        self.steps = 0
        self.running = False
        self._buttons: List[UIButton] = []
        self._layout(win_w, win_h)

        self.clock = pygame.time.Clock()
        self.steps_per_sec = 8
        self.overlay: Set[Coord] = set()
        self.report: Optional[SolveReport] = None
        self.error: Optional[str] = None
        self._recompute()

    # ---------- layout ----------
    def _layout(self, win_w: int, win_h: int):
        """Integer cell size that fits the tile window, grid centred left of the panel."""
        span_w = (2 * self.radius + 1) * self.grid.width
        span_h = (2 * self.radius + 1) * self.grid.height
        avail_w = max(1, win_w - PANEL_W - 2 * GRID_MARGIN)
        avail_h = max(1, win_h - 2 * GRID_MARGIN)
        self.cell_size = max(1, min(avail_w // span_w, avail_h // span_h))

        draw_w = span_w * self.cell_size
        draw_h = span_h * self.cell_size
        left_x = max(0, (win_w - PANEL_W - draw_w) // 2)
        top_y  = max(0, (win_h - draw_h) // 2)
        self._grid_origin = (left_x, top_y)
        self._right_band = pygame.Rect(win_w - PANEL_W, 0, PANEL_W, win_h)
        self._build_buttons()

    def run(self):
        while True:
            self._handle_events()
            if self.running:
                self._tick()
            self._draw()
            self.clock.tick(60)

    def _tick(self):
        t0 = time.time()
        if not hasattr(self, "_last_step_t"):
            self._last_step_t = 0.0
        if t0 - self._last_step_t >= 1.0 / max(1, self.steps_per_sec):
            self._last_step_t = t0
            self._bump_steps(2)

    # ---------- state ----------
    def _recompute(self):
        self.error = None
        self.overlay = window_overlay(self.grid, self.steps, self.radius)
        try:
            self.report = solve_with_report(self.grid, self.steps, self.config)
        except LatticeReachError as ex:
            logger.warning(f"viewer: {ex}")
            self.error = str(ex)
            self.report = None

    def _bump_steps(self, dv: int):
        cap = window_step_cap(self.grid, self.radius)
        new = max(0, min(cap, self.steps + dv))
        if new == self.steps:
            self.running = False
            self._refresh_active_states()
            return
        self.steps = new
        self._recompute()

    def _reset(self):
        self.running = False
        self.steps = 0
        self._recompute()
        self._refresh_active_states()

    def _switch_map(self, key: str):
        if key not in self.maps:
            return
        try:
            self.grid = load_grid(self.maps[key])
        except LatticeReachError as ex:
            logger.error(f"Failed to load map {key}: {ex}")
            return
        self.selected_map_key = key
        pygame.display.set_caption(f"Lattice Reach — {key}")
        self._layout(*self.screen.get_size())
        self._reset()

    def _toggle_run(self):
        self.running = not self.running
        self._refresh_active_states()

    def _handle_events(self):
        keys = list(self.maps)
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            elif e.type == pygame.KEYDOWN:
                big = self.grid.width if e.mod & pygame.KMOD_SHIFT else 2
                if e.key in (pygame.K_ESCAPE, pygame.K_q):
                    pygame.quit(); sys.exit(0)
                elif e.key == pygame.K_SPACE:
                    self._toggle_run()
                elif e.key == pygame.K_r:
                    self._reset()
                elif e.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    self._bump_steps(big)
                elif e.key in (pygame.K_MINUS, pygame.K_UNDERSCORE, pygame.K_KP_MINUS):
                    self._bump_steps(-big)
                elif pygame.K_1 <= e.key <= pygame.K_9:
                    idx = e.key - pygame.K_1
                    if idx < len(keys):
                        self._switch_map(keys[idx])
            elif e.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((e.w, e.h), pygame.RESIZABLE)
                self._layout(e.w, e.h)
            elif e.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
                for b in self._buttons:
                    b.handle_mouse(e)

    # ---------- drawing ----------
    def _draw(self):
        self._draw_backdrop()
        self._draw_grid()
        self._draw_metrics_and_buttons()
        pygame.display.flip()

    def _draw_backdrop(self):
        self.screen.fill(BACKDROP)

    def _cell_rect(self, c: Coord) -> pygame.Rect:
        """Absolute plane coord -> screen rect (window origin at tile (-r, -r))."""
        cs = self.cell_size
        ox, oy = self._grid_origin
        x = c[0] + self.radius * self.grid.width
        y = c[1] + self.radius * self.grid.height
        return pygame.Rect(ox + x*cs, oy + y*cs, cs, cs)

    def _draw_grid(self):
        r = self.radius
        w, h = self.grid.width, self.grid.height
        for y in range(-r * h, (r + 1) * h):
            for x in range(-r * w, (r + 1) * w):
                rect = self._cell_rect((x, y))
                if self.grid.is_block_periodic((x, y)):
                    color = ROCK
                else:
                    color = FLOOR_A if (x // w + y // h) % 2 == 0 else FLOOR_B
                pygame.draw.rect(self.screen, color, rect)

        cs = self.cell_size
        tint = pygame.Surface((cs, cs), pygame.SRCALPHA); tint.fill(NEON_CYAN_A)
        for c in self.overlay:
            if abs(self.grid.tile_of(c)[0]) <= r and abs(self.grid.tile_of(c)[1]) <= r:
                self.screen.blit(tint, self._cell_rect(c).topleft)

        # tile edges
        ox, oy = self._grid_origin
        span_w = (2 * r + 1) * w * cs
        span_h = (2 * r + 1) * h * cs
        for i in range(2 * r + 2):
            pygame.draw.line(self.screen, TILE_EDGE, (ox + i*w*cs, oy), (ox + i*w*cs, oy + span_h), 1)
        for j in range(2 * r + 2):
            pygame.draw.line(self.screen, TILE_EDGE, (ox, oy + j*h*cs), (ox + span_w, oy + j*h*cs), 1)

        start = self._cell_rect(self.grid.start)
        pygame.draw.circle(self.screen, BLUE, start.center, max(2, cs // 2))

    # ---------- buttons + metrics ----------
    def _build_buttons(self):
        self._buttons.clear()
        rb = self._right_band
        x = rb.x + 16
        y = rb.y + 300  # leaves space for metrics card above
        w = max(160, rb.width - 32)
        h = 38
        gap = 10

        def add(label, cb, *, togglable=False, store_as: Optional[str] = None):
            rect = pygame.Rect(x, y, w, h)
            btn = UIButton(label, rect, cb, togglable=togglable)
            self._buttons.append(btn)
            if store_as:
                setattr(self, store_as, btn)

        add("Grow / Pause", self._toggle_run, togglable=True, store_as="btn_run"); y += h + gap
        add("Reset", self._reset); y += h + gap

        minus_rect = pygame.Rect(x, y, (w-8)//2, h)
        plus_rect  = pygame.Rect(x + (w-8)//2 + 8, y, (w-8)//2, h)
        self._buttons.append(UIButton("Steps −", minus_rect, lambda: self._bump_steps(-2)))
        self._buttons.append(UIButton("Steps +", plus_rect,  lambda: self._bump_steps(+2)))
        y += h + gap

        self._map_buttons: Dict[str, UIButton] = {}
        for i, key in enumerate(list(self.maps)[:9]):
            rect = pygame.Rect(x, y, w, h)
            btn = UIButton(f"Map {i + 1}: {key}", rect, lambda k=key: self._switch_map(k), togglable=True)
            self._buttons.append(btn)
            self._map_buttons[key] = btn
            y += h + gap

        self._refresh_active_states()

    def _refresh_active_states(self):
        if hasattr(self, "btn_run"):
            self.btn_run.set_active(self.running)
        for key, btn in getattr(self, "_map_buttons", {}).items():
            btn.set_active(key == self.selected_map_key)

    def _draw_metrics_and_buttons(self):
        rb = self._right_band
        card = pygame.Surface((rb.width - 20, 280), pygame.SRCALPHA)
        pygame.draw.rect(card, CARD_BG, card.get_rect(), border_radius=14)
        hi = pygame.Surface((card.get_width(), 24), pygame.SRCALPHA)
        pygame.draw.rect(hi, CARD_HI, hi.get_rect(), border_radius=14)
        card.blit(hi, (0,0))
        self.screen.blit(card, (rb.x + 10, rb.y + 10))

        x0 = rb.x + 24
        y0 = rb.y + 18

        def line(text, big=False, color=TEXT_LIGHT):
            nonlocal y0
            f = self.font_big if big else self.font
            surf = f.render(text, True, color)
            self.screen.blit(surf, (x0, y0))
            y0 += surf.get_height() + 6

        line("Metrics", big=True, color=ACCENT_GOLD)
        line(f"Steps: {self.steps}")
        if self.error:
            line("Unsupported input", color=(220, 50, 47))
        m = self.report
        if m is not None:
            line(f"Reachable: {m.count}")
            line(f"Strategy: {m.strategy}")
            line(f"Tiles settled: {m.tiles_settled}")
            line(f"Tile searches: {m.tile_searches}")
            line(f"Cache hits/misses: {m.cache_hits}/{m.cache_misses}")
        line("-" * 26)
        line(f"Map: {self.selected_map_key} ({self.grid.width}x{self.grid.height})")
        line(f"Open cells per tile: {self.grid.open_cell_count()}")
        line(f"Speed: {self.steps_per_sec} steps/s")

        for b in self._buttons:
            b.draw(self.screen, self.font)


# ---------- main ----------
def main():
    logger.enable("lattice_reach")
    map_dir = resolve_map_dir()
    maps = discover_maps(map_dir)
    if not maps:
        print(f"No maps found in {map_dir} (pass --maps=<dir>)")
        sys.exit(1)
    try:
        config = resolve_config()
    except ValueError as ex:
        print(f"Bad configuration: {ex}")
        sys.exit(1)
    Viewer(maps, config, radius=resolve_window_tiles()).run()

if __name__ == "__main__":
    main()
