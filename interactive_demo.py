"""
Interactive viewer for hierarchical block space.
Pan with the arrow keys or WASD, zoom with Z/X.
"""

import logging
import sys

import readchar
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from address_types import NavigationRules
from ascii_render import render_view, screen_delta_to_leaf
from block_address import HierarchicalAddress
from view_state import ViewState

logger = logging.getLogger(__name__)

SCREEN_WIDTH = 76
SCREEN_HEIGHT = 24
PAN_STEP = 4.0  # characters per key press
ZOOM_STEP = 0.1  # total zoom per key press

PAN_KEYS = {
    readchar.key.LEFT: (-1, 0),
    readchar.key.RIGHT: (1, 0),
    readchar.key.UP: (0, -1),
    readchar.key.DOWN: (0, 1),
    "a": (-1, 0),
    "d": (1, 0),
    "w": (0, -1),
    "s": (0, 1),
}


class InteractiveViewer:
    """Keyboard-driven camera over an infinitely subdivided grid."""

    def __init__(self, rules: NavigationRules | None = None) -> None:
        self.rules = rules or NavigationRules()
        self.view = self.initial_view()
        self.console = Console()
        self.status_message = "Ready"

    def initial_view(self) -> ViewState:
        return ViewState(HierarchicalAddress(rules=self.rules))

    def generate_display(self) -> Panel:
        """Generate the current display with grid and status."""
        view = self.view
        px, py = view.position

        status = Text()
        status.append("Address: ", style="bold")
        digits = " ".join(f"{d.x}{d.y}" for d in view.address) or "(root)"
        status.append(f"{digits}\n")
        status.append("Block: ", style="bold")
        status.append(f"{view.address.identity()}   ")
        status.append("Position: ", style="bold")
        status.append(f"({px:.3f}, {py:.3f})   ")
        status.append("Zoom: ", style="bold")
        status.append(f"{view.total_zoom():.2f} (level {view.zoom_level:.2f})\n\n")

        grid_text = render_view(view, SCREEN_WIDTH, SCREEN_HEIGHT)
        status.append(Text.from_ansi(grid_text))
        status.append("\n\n")
        status.append("Keys: ", style="bold cyan")
        status.append("arrows/WASD pan  Z zoom out  X zoom in  R reset  Q quit\n")
        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        return Panel(status, title="Block Space Viewer", border_style="green", width=SCREEN_WIDTH + 4)

    def pan(self, sx: int, sy: int) -> None:
        """Pan by one step in screen direction (sx, sy)."""
        dx, dy = screen_delta_to_leaf(self.view, sx * PAN_STEP, sy * PAN_STEP, SCREEN_WIDTH)
        residual = self.view.offset(dx, dy)
        if residual != (0, 0):
            self.status_message = f"Wrapped at the edge of depth {self.view.address.depth()}"
        else:
            self.status_message = f"Panned by ({dx:.3f}, {dy:.3f}) blocks"

    def zoom(self, diff: float) -> None:
        before = self.view.total_zoom()
        self.view.zoom(diff)
        if self.view.total_zoom() == before:
            self.status_message = "Already at the root"
        else:
            self.status_message = f"Zoom {self.view.total_zoom():.2f}"

    def reset(self) -> None:
        self.view = self.initial_view()
        self.status_message = "View reset"

    def handle_key(self, key: str) -> bool:
        """Apply one key press. Returns False when the viewer should quit."""
        if key in PAN_KEYS:
            self.pan(*PAN_KEYS[key])
            return True

        lowered = key.lower()
        if lowered in PAN_KEYS:
            self.pan(*PAN_KEYS[lowered])
        elif lowered == "q":
            self.status_message = "Quitting..."
            return False
        elif lowered == "r":
            self.reset()
        elif lowered == "z":
            self.zoom(-ZOOM_STEP)
        elif lowered == "x":
            self.zoom(ZOOM_STEP)
        else:
            self.status_message = f"Unknown key: {repr(key)}"
        return True

    def run(self) -> None:
        """Run the interactive viewer until Q or Ctrl-C."""
        with Live(self.generate_display(), console=self.console, refresh_per_second=10) as live:
            try:
                while True:
                    live.update(self.generate_display())
                    key = readchar.readkey()
                    if not self.handle_key(key):
                        live.update(self.generate_display())
                        break
            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display())


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "once":
        # Non-interactive: render a single frame a few levels down
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

        viewer = InteractiveViewer()
        viewer.zoom(2.85)
        logger.info("rendering %r", viewer.view.address)
        print(render_view(viewer.view, SCREEN_WIDTH, SCREEN_HEIGHT))
    else:
        InteractiveViewer().run()
