"""Layout cursor for the paginated assessment report.

The report is drawn as a linear walk down the page. ``LayoutCursor`` tracks
the running vertical offset from the top margin and decides when a block no
longer fits; the renderer asks before drawing each block and starts a new
page when told to. No reportlab import here, so pagination is testable on
its own.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

# A4 in points
A4_WIDTH: float = 595.2756
A4_HEIGHT: float = 841.8898
DEFAULT_MARGIN: float = 50.0


@dataclass(frozen=True)
class PageGeometry:
    width: float = A4_WIDTH
    height: float = A4_HEIGHT
    margin_top: float = DEFAULT_MARGIN
    margin_bottom: float = DEFAULT_MARGIN
    margin_left: float = DEFAULT_MARGIN
    margin_right: float = DEFAULT_MARGIN

    @property
    def usable_height(self) -> float:
        return self.height - self.margin_top - self.margin_bottom

    @property
    def usable_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def left(self) -> float:
        return self.margin_left

    @property
    def right(self) -> float:
        return self.width - self.margin_right


class LayoutCursor:
    """Running vertical offset plus page-break predicate."""

    def __init__(
        self,
        geometry: PageGeometry | None = None,
        on_page_break: Callable[[int], None] | None = None,
    ) -> None:
        self.geometry = geometry or PageGeometry()
        self.offset = 0.0
        self.page = 1
        self._on_page_break = on_page_break

    @property
    def remaining(self) -> float:
        return self.geometry.usable_height - self.offset

    def needs_break(self, block_height: float) -> bool:
        """True when a block of this height would run past the usable area.

        A block taller than a whole page never triggers a break on a fresh
        page, otherwise the walk would never terminate.
        """
        if self.offset <= 0:
            return False
        return self.offset + block_height > self.geometry.usable_height

    def ensure(self, block_height: float) -> bool:
        """Break the page if the block does not fit. Returns True on break."""
        if self.needs_break(block_height):
            self.new_page()
            return True
        return False

    def new_page(self) -> None:
        if self._on_page_break is not None:
            self._on_page_break(self.page)
        self.page += 1
        self.offset = 0.0

    def advance(self, dy: float) -> None:
        self.offset += dy

    def y(self, extra: float = 0.0) -> float:
        """Page y-coordinate (origin bottom-left) for the current offset plus extra."""
        return self.geometry.height - self.geometry.margin_top - self.offset - extra
