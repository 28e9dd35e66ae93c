"""
Tests for ASCII rendering of block views.
"""

import pytest

from address_types import NavigationRules
from ascii_render import (
    BlockVisit,
    draw_outline,
    fade_ratio,
    level_colors,
    render_view,
    screen_delta_to_leaf,
    visible_offsets,
    walk_blocks,
)
from block_address import HierarchicalAddress
from identity import identity
from view_state import ViewState


class TestWalkBlocks:
    """Tests for the explicit-stack block traversal."""

    def test_level_zero_only(self) -> None:
        """With no lookahead only the block itself is visited."""
        a = HierarchicalAddress([(1, 2)])
        visits = list(walk_blocks(a, 0))
        assert visits == [BlockVisit(0, 0.0, 0.0, 1.0, identity(a))]

    def test_one_level(self) -> None:
        """One level visits the block and its N*N children."""
        a = HierarchicalAddress([(1, 2)])
        visits = list(walk_blocks(a, 1))
        assert len(visits) == 1 + 100
        assert [v.level for v in visits].count(1) == 100

        children = {(round(v.x * 10), round(v.y * 10)): v for v in visits if v.level == 1}
        child = children[(3, 7)]
        assert child.span == pytest.approx(0.1)
        assert child.token == identity(HierarchicalAddress([(1, 2), (3, 7)]))

    def test_two_levels_small_radix(self) -> None:
        """Grandchildren carry their full address and leaf-unit offset."""
        rules = NavigationRules(radix=3)
        a = HierarchicalAddress([(2, 0)], rules=rules)
        visits = list(walk_blocks(a, 2))
        assert len(visits) == 1 + 9 + 81

        expected = HierarchicalAddress([(2, 0), (1, 2), (0, 1)], rules=rules)
        match = [v for v in visits if v.token == identity(expected)]
        assert len(match) == 1
        assert match[0].level == 2
        assert match[0].x == pytest.approx(1 / 3)
        assert match[0].y == pytest.approx(2 / 3 + 1 / 9)
        assert match[0].span == pytest.approx(1 / 9)

    def test_tokens_unique(self) -> None:
        """Every visited block is a different block."""
        rules = NavigationRules(radix=3)
        visits = list(walk_blocks(HierarchicalAddress(rules=rules), 3))
        assert len({v.token for v in visits}) == len(visits)

    def test_does_not_mutate_address(self) -> None:
        """The caller's address is untouched during and after the walk."""
        a = HierarchicalAddress([(4, 4), (5, 5)])
        for _ in walk_blocks(a, 2):
            assert a == HierarchicalAddress([(4, 4), (5, 5)])

    def test_keep_prunes_subtrees(self) -> None:
        """Rejected blocks are neither visited nor descended into."""
        asked: list[tuple[float, float, float]] = []

        def keep(x: float, y: float, span: float) -> bool:
            asked.append((x, y, span))
            return x < 0.055

        visits = list(walk_blocks(HierarchicalAddress([(1, 1)]), 2, keep=keep))
        # Root, the ten children in column 0, and the six leftmost columns under each
        assert len(visits) == 1 + 10 + 10 * 60
        assert all(v.x < 0.055 for v in visits)
        # Grandchildren are only considered under the ten kept children
        assert len(asked) == 1 + 100 + 10 * 100

    def test_keep_rejecting_root(self) -> None:
        """A rejected root yields nothing."""
        assert list(walk_blocks(HierarchicalAddress(), 2, keep=lambda x, y, s: False)) == []

    def test_rejects_negative_levels(self) -> None:
        """Lookahead cannot be negative."""
        with pytest.raises(ValueError):
            list(walk_blocks(HierarchicalAddress(), -1))


class TestCamera:
    """Tests for screen/leaf conversions and the fade policy."""

    def test_visible_offsets_centered(self) -> None:
        """At the root center only the leaf itself is on screen."""
        assert visible_offsets(ViewState(), 80, 24) == [(0, 0)]

    def test_visible_offsets_near_edge(self) -> None:
        """Near the left edge the left neighbour becomes visible."""
        v = ViewState(position=(0.1, 0.5))
        assert visible_offsets(v, 80, 24) == [(-1, 0), (0, 0)]

    def test_visible_offsets_zoomed(self) -> None:
        """Zooming in shrinks the visible range."""
        v = ViewState(position=(0.5, 0.5), zoom_level=0.5)
        assert visible_offsets(v, 80, 24) == [(0, 0)]

    def test_screen_delta_to_leaf(self) -> None:
        """Characters are converted with the current scale and aspect."""
        assert screen_delta_to_leaf(ViewState(), 8.0, 4.0, 80) == pytest.approx((0.1, 0.1))
        zoomed = ViewState(zoom_level=0.5)
        assert screen_delta_to_leaf(zoomed, 44.0, 0.0, 80) == pytest.approx((0.1, 0.0))

    def test_fade_ratio(self) -> None:
        """No fade below 0.8, full fade at 1."""
        assert fade_ratio(0.0) == 0.0
        assert fade_ratio(0.8) == 0.0
        assert fade_ratio(0.9) == pytest.approx(0.5)
        assert fade_ratio(0.999) == pytest.approx(0.995)

    def test_level_colors_lookahead(self) -> None:
        """A second finer level appears once the fade starts."""
        assert len(level_colors(0.0)) == 2
        assert len(level_colors(0.5)) == 2
        assert len(level_colors(0.85)) == 3
        assert len(level_colors(0.95)) == 3

    def test_leaf_grid_dropped_late_in_fade(self) -> None:
        """Near the next level the leaf outlines are no longer drawn."""
        assert level_colors(0.85)[0] is not None
        assert level_colors(0.95)[0] is None
        assert level_colors(0.9999)[0] is None
        assert all(color is not None for color in level_colors(0.9999)[1:])


class TestRender:
    """Tests for render_view."""

    def test_dimensions(self) -> None:
        """Output has the requested number of lines."""
        output = render_view(ViewState(), 80, 24)
        assert len(output.split("\n")) == 24

    def test_labels_current_block(self) -> None:
        """The leaf block's identity is printed inside it."""
        v = ViewState()
        assert identity(v.address) in render_view(v, 80, 24)

    def test_labels_sub_blocks_when_zoomed(self) -> None:
        """Close to the next level the sub-block under the camera is labelled."""
        v = ViewState(zoom_level=0.9)
        output = render_view(v, 80, 24)
        assert identity(HierarchicalAddress([(5, 5)])) in output

    def test_skips_unrepresentable_neighbours(self) -> None:
        """At the root there are no neighbours to draw."""
        v = ViewState(position=(0.05, 0.5))
        output = render_view(v, 80, 24)
        assert identity(v.address) in output

    def test_does_not_mutate_view(self) -> None:
        """Rendering is read-only."""
        v = ViewState(HierarchicalAddress([(3, 3)]), (0.2, 0.9), 0.95)
        render_view(v, 60, 20)
        assert v.is_close(ViewState(HierarchicalAddress([(3, 3)]), (0.2, 0.9), 0.95))

    def test_rejects_empty_screen(self) -> None:
        """A zero-sized screen is a caller error."""
        with pytest.raises(ValueError):
            render_view(ViewState(), 0, 10)

    def test_draw_outline_clips(self) -> None:
        """Outlines partly off screen are clipped."""
        buffer = [[" "] * 5 for _ in range(3)]
        draw_outline(buffer, -2, 0, 2, 4, lambda s: s)
        assert "".join(buffer[0]) == "--+  "
        assert "".join(buffer[1]) == "  |  "
        assert "".join(buffer[2]) == "  |  "

    def test_skips_off_screen_sub_blocks(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Only sub-blocks near the camera get an identity computed."""
        import ascii_render

        calls: list[int] = []

        def counting_identity(address: HierarchicalAddress) -> str:
            calls.append(address.depth())
            return identity(address)

        monkeypatch.setattr(ascii_render, "identity", counting_identity)
        output = render_view(ViewState(zoom_level=0.85), 80, 24)
        assert len(output.split("\n")) == 24
        assert 0 < len(calls) < 1000
