"""
ASCII rendering for hierarchical block views.

Draws the blocks around the camera as character outlines, the leaf level
plus a few finer levels so the grid cross-fades as zoom_level approaches 1,
and prints each block's identity token inside it when there is room.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterator

import simple_chalk as chalk  # type: ignore[import-untyped]

from address_types import AddressOverflow, Digit
from block_address import HierarchicalAddress
from identity import identity
from view_state import ViewState

logger = logging.getLogger(__name__)

FADE_START = 0.8  # zoom_level where the next finer level starts fading in
CHAR_ASPECT = 0.5  # terminal cells are roughly twice as tall as wide
MIN_BLOCK_CHARS = 2  # narrower blocks are not drawn

Colorize = Callable[[str], str]


# =============================================================================
# Block Traversal
# =============================================================================


@dataclass(frozen=True)
class BlockVisit:
    """One block reached by walk_blocks, positioned in leaf-block units."""

    level: int  # 0 = the walked block, 1 = its sub-blocks, ...
    x: float
    y: float
    span: float  # radix ** -level
    token: str


def _sub_digits(radix: int) -> Iterator[Digit]:
    for x in range(radix):
        for y in range(radix):
            yield Digit(x, y)


def walk_blocks(
    address: HierarchicalAddress,
    levels: int,
    keep: Callable[[float, float, float], bool] | None = None,
) -> Iterator[BlockVisit]:
    """
    Visit the block at address and every sub-block down to `levels` below it.

    Depth-first with an explicit stack. A single clone of the address is
    descended with zoom_in and restored with zoom_out, so the caller's
    address is never touched.

    Args:
        address: Block to start from
        levels: How many finer levels to descend
        keep: Optional predicate on (x, y, span); blocks it rejects are
            neither visited nor descended into
    """
    if levels < 0:
        raise ValueError(f"levels must be >= 0, got {levels}")
    if keep is not None and not keep(0.0, 0.0, 1.0):
        return

    cursor = address.copy()
    n = cursor.radix
    yield BlockVisit(0, 0.0, 0.0, 1.0, identity(cursor))
    if levels == 0:
        return

    # Each frame: (x, y, span, remaining sub-digits) of a block whose
    # children are being visited. The cursor points at the top frame's block.
    stack = [(0.0, 0.0, 1.0, _sub_digits(n))]
    while stack:
        x, y, span, pending = stack[-1]
        digit = next(pending, None)
        if digit is None:
            stack.pop()
            if stack:
                cursor.zoom_out()
            continue

        child_span = span / n
        cx = x + digit.x * child_span
        cy = y + digit.y * child_span
        if keep is not None and not keep(cx, cy, child_span):
            continue

        cursor.zoom_in(digit.x, digit.y)
        yield BlockVisit(len(stack), cx, cy, child_span, identity(cursor))

        if len(stack) < levels:
            stack.append((cx, cy, child_span, _sub_digits(n)))
        else:
            cursor.zoom_out()


# =============================================================================
# Camera
# =============================================================================


def fade_ratio(zoom_level: float) -> float:
    return min(max((zoom_level - FADE_START) / (1.0 - FADE_START), 0.0), 1.0)


def level_colors(zoom_level: float) -> list[Colorize | None]:
    """
    Outline color per level, leaf level first; None means the level is not drawn.

    Below FADE_START the leaf grid and one finer level are drawn. Past it a
    second finer level appears, and in the second half of the fade the leaf
    grid is dropped while the finer levels take over its colors, so the
    picture at zoom_level 1 matches the picture at zoom_level 0 one level
    deeper.
    """
    ratio = fade_ratio(zoom_level)
    if ratio == 0.0:
        return [chalk.blue, chalk.green]
    if ratio < 0.5:
        return [chalk.blue, chalk.green, chalk.cyan]
    return [None, chalk.blue, chalk.green]


def screen_delta_to_leaf(
    view: ViewState, dx: float, dy: float, width: int
) -> tuple[float, float]:
    """Convert a pan in screen characters into leaf-block units."""
    scale = view.scale(width)
    return (dx / scale, dy / (scale * CHAR_ASPECT))


def visible_offsets(view: ViewState, width: int, height: int) -> list[tuple[int, int]]:
    """Leaf-block offsets, relative to the current leaf, that touch the screen."""
    scale = view.scale(width)
    half_w = width / 2 / scale
    half_h = height / 2 / (scale * CHAR_ASPECT)
    px, py = view.position
    xs = range(math.floor(px - half_w), math.ceil(px + half_w))
    ys = range(math.floor(py - half_h), math.ceil(py + half_h))
    return [(ix, iy) for iy in ys for ix in xs]


# =============================================================================
# Rendering
# =============================================================================


def _put(buffer: list[list[str]], col: int, row: int, char: str) -> None:
    if 0 <= row < len(buffer) and 0 <= col < len(buffer[row]):
        buffer[row][col] = char


def draw_outline(
    buffer: list[list[str]],
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    colorize: Colorize,
) -> None:
    """Draw a rectangle outline with corners at (x0, y0) and (x1, y1), clipped."""
    height = len(buffer)
    width = len(buffer[0]) if buffer else 0
    horizontal = colorize("-")
    vertical = colorize("|")
    corner = colorize("+")

    for col in range(max(x0 + 1, 0), min(x1, width)):
        _put(buffer, col, y0, horizontal)
        _put(buffer, col, y1, horizontal)
    for row in range(max(y0 + 1, 0), min(y1, height)):
        _put(buffer, x0, row, vertical)
        _put(buffer, x1, row, vertical)
    for col, row in ((x0, y0), (x1, y0), (x0, y1), (x1, y1)):
        _put(buffer, col, row, corner)


def render_view(view: ViewState, width: int = 80, height: int = 24) -> str:
    """
    Render the blocks around the camera to an ASCII string with colors.

    Args:
        view: Camera state to draw
        width: Output width in characters
        height: Output height in characters

    Returns:
        Rendered string with ANSI color codes; identity tokens are uncolored
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"render size must be positive, got {width}x{height}")

    scale_x = view.scale(width)
    scale_y = scale_x * CHAR_ASPECT
    px, py = view.position
    n = view.radix

    colors = level_colors(view.zoom_level)
    lookahead = len(colors) - 1
    while lookahead > 0 and scale_x / n**lookahead < MIN_BLOCK_CHARS:
        lookahead -= 1

    outlines: list[tuple[int, int, int, int, int]] = []
    labels: list[tuple[int, int, str]] = []

    for ix, iy in visible_offsets(view, width, height):
        block = view.address.copy()
        try:
            residual = block.offset(ix, iy)
        except AddressOverflow:
            continue
        if residual != (0, 0):
            continue

        def on_screen(x: float, y: float, span: float, ix: int = ix, iy: int = iy) -> bool:
            left = width / 2 + (ix + x - px) * scale_x
            top = height / 2 + (iy + y - py) * scale_y
            return not (
                left + span * scale_x < 0
                or top + span * scale_y < 0
                or left >= width
                or top >= height
            )

        for visit in walk_blocks(block, lookahead, keep=on_screen):
            left = width / 2 + (ix + visit.x - px) * scale_x
            top = height / 2 + (iy + visit.y - py) * scale_y
            w = visit.span * scale_x
            h = visit.span * scale_y

            x0, y0 = math.floor(left), math.floor(top)
            x1, y1 = math.floor(left + w), math.floor(top + h)
            outlines.append((visit.level, x0, y0, x1, y1))

            # Labels are centered on the on-screen part of the block
            vx0, vx1 = max(x0, 0), min(x1, width - 1)
            vy0, vy1 = max(y0, 0), min(y1, height - 1)
            if len(visit.token) + 2 <= vx1 - vx0 and vy1 - vy0 >= 2:
                label_x = vx0 + (vx1 - vx0 - len(visit.token) + 1) // 2
                labels.append((label_x, (vy0 + vy1) // 2, visit.token))

    buffer: list[list[str]] = [[" " for _ in range(width)] for _ in range(height)]

    # Finer levels first so coarser outlines stay on top
    for level, x0, y0, x1, y1 in sorted(outlines, key=lambda o: -o[0]):
        colorize = colors[level]
        if colorize is not None:
            draw_outline(buffer, x0, y0, x1, y1, colorize)

    for label_x, label_y, token in labels:
        for i, char in enumerate(token):
            _put(buffer, label_x + i, label_y, char)

    logger.debug(
        "render_view: %d outlines, %d labels, lookahead=%d, scale=%.2f",
        len(outlines),
        len(labels),
        lookahead,
        scale_x,
    )
    return "\n".join("".join(row) for row in buffer)
