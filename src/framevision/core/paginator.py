"""Fixed-size page view over a growing line list."""

from __future__ import annotations

import math

from framevision.core.assembler import AppendResult, TextAssembler


class ConfigurationError(ValueError):
    """Raised for invalid pagination configuration."""


class Paginator:
    """Navigable page cursor over the lines of a TextAssembler.

    Pages are derived from the line count and page size on demand. When
    lines are appended while the cursor sits on the last page, the cursor
    follows the new last page; a cursor on an earlier page stays put so a
    user reviewing history is not moved.
    """

    def __init__(self, source: TextAssembler, page_size: int) -> None:
        """Initialize the paginator.

        Args:
            source: Assembler whose lines are paginated.
            page_size: Maximum lines per page.

        Raises:
            ConfigurationError: If page_size is not positive.
        """
        if page_size <= 0:
            raise ConfigurationError(f"page_size must be positive, got {page_size}")

        self._source = source
        self._page_size = page_size
        self._line_count = len(source)
        self._cursor = self.page_count - 1

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def line_count(self) -> int:
        return self._line_count

    @property
    def cursor(self) -> int:
        """Current page index."""
        return self._cursor

    @property
    def page_count(self) -> int:
        """Number of pages, at least 1 even with no lines."""
        return max(1, math.ceil(self._line_count / self._page_size))

    @property
    def is_last_page(self) -> bool:
        return self._cursor == self.page_count - 1

    def reset(self) -> None:
        """Return to the empty state."""
        self._line_count = 0
        self._cursor = 0

    def on_lines_appended(self, count: int) -> None:
        """Account for lines appended to the source.

        Args:
            count: Number of lines appended.
        """
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")

        # Compare against the last page before the update
        following = self.is_last_page
        self._line_count += count
        if following:
            self._cursor = self.page_count - 1
        else:
            self._cursor = min(self._cursor, self.page_count - 1)

    def on_last_line_updated(self) -> bool:
        """Account for an in-place edit of the last line.

        Returns:
            True if the current page shows the last line.
        """
        if self._line_count == 0:
            return False
        return self._cursor == (self._line_count - 1) // self._page_size

    def apply(self, result: AppendResult) -> bool:
        """Apply an assembler result.

        Returns:
            True if the content of the current page changed.
        """
        changed = False
        if result.last_line_updated:
            changed = self.on_last_line_updated()

        if result.count:
            before = self._cursor
            self.on_lines_appended(result.count)
            # New lines land on the current page or move the cursor to them
            changed = changed or self._cursor != before or self.on_last_line_updated()

        return changed

    def next_page(self) -> bool:
        """Move to the next page. Returns True if the cursor moved."""
        target = min(self._cursor + 1, self.page_count - 1)
        moved = target != self._cursor
        self._cursor = target
        return moved

    def previous_page(self) -> bool:
        """Move to the previous page. Returns True if the cursor moved."""
        target = max(self._cursor - 1, 0)
        moved = target != self._cursor
        self._cursor = target
        return moved

    def current_page(self) -> tuple[str, ...]:
        """Get the lines of the current page."""
        if self._line_count == 0:
            return ()

        start = self._cursor * self._page_size
        end = min(start + self._page_size, self._line_count)
        return self._source.lines(start, end)
