"""
Shared type definitions for hierarchical block navigation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_RADIX = 10
MAX_RADIX = 2**32  # digits must fit an unsigned 32-bit identity field


class OverflowPolicy(Enum):
    """What happens to carry that runs past the coarsest stored digit."""

    CLAMP = "clamp"  # Drop the residual and report it to the caller
    RAISE = "raise"  # Raise AddressOverflow, leave the address untouched


class EdgeDigitPolicy(Enum):
    """How zoom_in treats a component equal to the radix."""

    CARRY = "carry"  # Store 0 and carry +1 into the coarser digits
    REJECT = "reject"  # Raise ValueError


@dataclass(frozen=True)
class NavigationRules:
    """Rules governing address arithmetic."""

    radix: int = DEFAULT_RADIX
    overflow: OverflowPolicy = OverflowPolicy.CLAMP
    edge_digit: EdgeDigitPolicy = EdgeDigitPolicy.CARRY

    def __post_init__(self) -> None:
        if not isinstance(self.radix, int) or not 2 <= self.radix <= MAX_RADIX:
            raise ValueError(
                f"radix must be an integer in [2, {MAX_RADIX}], got {self.radix!r}"
            )


@dataclass(frozen=True)
class Digit:
    """One (x, y) digit pair of a hierarchical address."""

    x: int
    y: int

    def __iter__(self):
        yield self.x
        yield self.y


# =============================================================================
# Errors
# =============================================================================


class InvariantViolation(AssertionError):
    """An internal invariant no longer holds. Indicates a logic defect."""


class EmptyAddress(IndexError):
    """Raised when a digit is requested from (or popped off) the root address."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation}() called on the root address (depth 0)")
        self.operation = operation


class AddressOverflow(ValueError):
    """Carry ran past the coarsest digit under OverflowPolicy.RAISE."""

    def __init__(self, residual: tuple[int, int], depth: int) -> None:
        super().__init__(
            f"offset leaves residual carry {residual} beyond depth {depth}; "
            f"zoom out before panning this far"
        )
        self.residual = residual
        self.depth = depth


def check_invariant(condition: bool, message: str) -> None:
    """Raise InvariantViolation unless condition holds (survives python -O)."""
    if not condition:
        raise InvariantViolation(message)
