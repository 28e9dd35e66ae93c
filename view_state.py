"""
Camera view over hierarchical block space.

The view is a block address plus two continuous residues:

- position: where the camera center sits inside the leaf block, in [0, 1]
  along each axis
- zoom_level: fractional part of the total zoom, in [0, 1). The integer part
  is the address depth. At zoom_level 0 the leaf block spans the screen
  width; approaching 1, a single sub-block does.

Pan and zoom arrive as continuous per-tick deltas and are folded into the
address so that no float ever has to represent more than one block.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from address_types import check_invariant
from block_address import HierarchicalAddress

logger = logging.getLogger(__name__)


def _require_finite(value: float, name: str) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return value


def camera_scale(zoom_level: float, screen_width: float, radix: int) -> float:
    """
    Screen units per leaf block at the given fractional zoom.

    Interpolates linearly between screen_width (zoom_level 0) and
    screen_width * radix (zoom_level 1). The value at zoom_level 1 in depth d
    equals radix times the value at zoom_level 0 in depth d + 1, which is the
    same on-screen size since a depth d + 1 block is 1/radix of a depth d one.
    """
    scale_0 = screen_width
    scale_1 = screen_width * radix
    return scale_0 + zoom_level * (scale_1 - scale_0)


@dataclass(eq=False)
class ViewState:
    """Camera position: address, position inside the leaf, fractional zoom."""

    address: HierarchicalAddress = field(default_factory=HierarchicalAddress)
    position: tuple[float, float] = (0.5, 0.5)
    zoom_level: float = 0.0

    def __post_init__(self) -> None:
        self.position = (float(self.position[0]), float(self.position[1]))
        self.zoom_level = float(self.zoom_level)
        self._check_position()
        check_invariant(
            0.0 <= self.zoom_level < 1.0,
            f"zoom_level {self.zoom_level} outside [0, 1)",
        )

    def _check_position(self) -> None:
        px, py = self.position
        check_invariant(
            0.0 <= px <= 1.0 and 0.0 <= py <= 1.0,
            f"position ({px}, {py}) outside [0, 1] at depth {self.address.depth()}",
        )

    @property
    def radix(self) -> int:
        return self.address.radix

    def total_zoom(self) -> float:
        return self.address.depth() + self.zoom_level

    def offset(self, dx: float, dy: float) -> tuple[int, int]:
        """
        Pan by (dx, dy), measured in leaf blocks.

        Whole blocks are forwarded to the address, the fractional remainder
        becomes the new position.

        Returns:
            Residual carry reported by HierarchicalAddress.offset
        """
        x = self.position[0] + _require_finite(dx, "dx")
        y = self.position[1] + _require_finite(dy, "dy")

        ix = math.floor(x)
        iy = math.floor(y)
        new_position = (x - ix, y - iy)

        residual = self.address.offset(ix, iy)
        self.position = new_position
        self._check_position()
        return residual

    def zoom(self, diff: float) -> None:
        """
        Change total zoom by diff, clamped below at 0.

        Digits are popped or pushed until depth matches the integer part of
        the new total zoom, re-expressing position in each new frame. Both
        loops always run to completion so the state never rests mid-level.
        """
        zoom = max(self.total_zoom() + _require_finite(diff, "diff"), 0.0)
        target_depth = math.floor(zoom)
        self.zoom_level = zoom - target_depth
        check_invariant(
            0.0 <= self.zoom_level < 1.0,
            f"zoom_level {self.zoom_level} outside [0, 1)",
        )

        n = self.radix
        while self.address.depth() > target_depth:
            digit = self.address.zoom_out()
            px, py = self.position
            self.position = ((digit.x + px) / n, (digit.y + py) / n)
            logger.debug("zoom out of %s -> position %s", digit, self.position)
            self._check_position()

        while self.address.depth() < target_depth:
            px, py = self.position
            # A position of exactly 1.0 stays in the last sub-block.
            bx = min(math.floor(px * n), n - 1)
            by = min(math.floor(py * n), n - 1)
            self.address.zoom_in(bx, by)
            self.position = (px * n - bx, py * n - by)
            logger.debug("zoom into (%d, %d) -> position %s", bx, by, self.position)
            self._check_position()

    def copy(self) -> ViewState:
        return ViewState(self.address.copy(), self.position, self.zoom_level)

    def is_close(self, other: ViewState, tol: float = 1e-5) -> bool:
        """Same address, position and zoom_level equal within tol."""
        return (
            self.address == other.address
            and abs(self.position[0] - other.position[0]) <= tol
            and abs(self.position[1] - other.position[1]) <= tol
            and abs(self.zoom_level - other.zoom_level) <= tol
        )

    def scale(self, screen_width: float) -> float:
        """Screen units per leaf block for this view."""
        return camera_scale(self.zoom_level, screen_width, self.radix)
