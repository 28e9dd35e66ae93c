"""
Hierarchical block addresses.

Space is organized in blocks, each block split into N x N sub-blocks. An
address names one block by listing, from the root down, which sub-block to
enter at every level. Read as a number, the address is a mixed-radix value
with the coarsest digit first, so panning is addition with carry and zooming
pushes or pops the least significant digit.

Canonical form: every stored digit component lies in [0, N). Two addresses
are equal exactly when their digit sequences are equal.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from address_types import (
    AddressOverflow,
    Digit,
    EdgeDigitPolicy,
    EmptyAddress,
    NavigationRules,
    OverflowPolicy,
    check_invariant,
)
from identity import identity as address_identity

logger = logging.getLogger(__name__)

DEFAULT_RULES = NavigationRules()


def _require_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {value!r}")
    return value


class HierarchicalAddress:
    """A finite sequence of digit pairs naming one block below the root."""

    __slots__ = ("_digits", "_rules")

    def __init__(
        self,
        digits: Iterable[Digit | tuple[int, int]] = (),
        rules: NavigationRules = DEFAULT_RULES,
    ) -> None:
        self._rules = rules
        self._digits: list[Digit] = []
        n = rules.radix
        for level, digit in enumerate(digits):
            x, y = digit
            x = _require_int(x, "digit x")
            y = _require_int(y, "digit y")
            if not (0 <= x < n and 0 <= y < n):
                raise ValueError(
                    f"digit ({x}, {y}) at level {level} outside [0, {n}) "
                    f"for radix {n}"
                )
            self._digits.append(Digit(x, y))

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def rules(self) -> NavigationRules:
        return self._rules

    @property
    def radix(self) -> int:
        return self._rules.radix

    @property
    def digits(self) -> tuple[Digit, ...]:
        return tuple(self._digits)

    def depth(self) -> int:
        """Number of digits; 0 names the root block."""
        return len(self._digits)

    def span(self) -> int:
        """Leaf blocks per axis that fit under the root at the current depth."""
        return self.radix ** len(self._digits)

    def last_digit(self) -> Digit:
        """Finest digit. Raises EmptyAddress at depth 0."""
        if not self._digits:
            raise EmptyAddress("last_digit")
        return self._digits[-1]

    def identity(self) -> str:
        return address_identity(self)

    def copy(self) -> HierarchicalAddress:
        clone = HierarchicalAddress.__new__(HierarchicalAddress)
        clone._rules = self._rules
        clone._digits = list(self._digits)
        return clone

    def __len__(self) -> int:
        return len(self._digits)

    def __iter__(self) -> Iterator[Digit]:
        return iter(self._digits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HierarchicalAddress):
            return NotImplemented
        return self.radix == other.radix and self._digits == other._digits

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        pairs = ", ".join(f"({d.x}, {d.y})" for d in self._digits)
        return f"HierarchicalAddress([{pairs}], radix={self.radix})"

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def offset(self, dx: int, dy: int) -> tuple[int, int]:
        """
        Move by (dx, dy) blocks at the current leaf level.

        Deltas are added digit by digit from the finest level towards the
        root, carrying floor((sum) / N) upward. Propagation stops as soon as
        both carries are zero, so small moves only touch the finest digits.

        There is no root escape: carry left over after the coarsest digit is
        handled by rules.overflow. Under CLAMP it is dropped, under RAISE
        AddressOverflow is raised and the address is left unchanged.

        Args:
            dx: Horizontal displacement in leaf blocks
            dy: Vertical displacement in leaf blocks

        Returns:
            The residual carry (cx, cy) that was not applied; (0, 0) when the
            displacement is fully represented.
        """
        dx = _require_int(dx, "dx")
        dy = _require_int(dy, "dy")
        n = self.radix

        updates: list[tuple[int, Digit]] = []
        level = len(self._digits) - 1
        while level >= 0 and (dx != 0 or dy != 0):
            digit = self._digits[level]
            sx = digit.x + dx
            sy = digit.y + dy
            rx = sx % n
            ry = sy % n
            dx = (sx - rx) // n
            dy = (sy - ry) // n
            updates.append((level, Digit(rx, ry)))
            level -= 1

        residual = (dx, dy)
        if residual != (0, 0):
            if self._rules.overflow is OverflowPolicy.RAISE:
                raise AddressOverflow(residual, len(self._digits))
            logger.debug(
                "offset clamped at depth %d, dropped carry (%d, %d)",
                len(self._digits),
                dx,
                dy,
            )

        for index, digit in updates:
            check_invariant(
                0 <= digit.x < n and 0 <= digit.y < n,
                f"carry produced non-canonical digit {digit} at level {index}",
            )
            self._digits[index] = digit
        return residual

    def zoom_in(self, x: int, y: int) -> None:
        """
        Descend into sub-block (x, y) of the current leaf.

        Components may equal N: such a coordinate sits on the far edge of the
        leaf, i.e. at sub-block 0 of the next sibling. Under
        EdgeDigitPolicy.CARRY it is stored as 0 and a carry of 1 is applied
        to the existing digits (subject to the overflow policy); under
        REJECT it raises ValueError.
        """
        x = _require_int(x, "x")
        y = _require_int(y, "y")
        n = self.radix
        if not (0 <= x <= n and 0 <= y <= n):
            raise ValueError(f"zoom_in coordinate ({x}, {y}) outside [0, {n}]")

        carry_x = 1 if x == n else 0
        carry_y = 1 if y == n else 0
        if carry_x or carry_y:
            if self._rules.edge_digit is EdgeDigitPolicy.REJECT:
                raise ValueError(
                    f"zoom_in coordinate ({x}, {y}) is on the block edge; "
                    f"rejected by edge digit policy"
                )
            self.offset(carry_x, carry_y)
            x -= carry_x * n
            y -= carry_y * n

        self._digits.append(Digit(x, y))

    def zoom_out(self) -> Digit:
        """Pop and return the finest digit. Raises EmptyAddress at depth 0."""
        if not self._digits:
            raise EmptyAddress("zoom_out")
        return self._digits.pop()
