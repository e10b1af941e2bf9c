"""Response session binding text assembly and pagination."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from framevision.core.assembler import AppendResult, TextAssembler
from framevision.core.paginator import Paginator


@dataclass(frozen=True)
class PageView:
    """Consistent view of the session at one point in time."""

    lines: tuple[str, ...]
    cursor: int
    page_count: int
    line_count: int

    @property
    def text(self) -> str:
        """Page lines joined for the wearable display."""
        return "\n".join(self.lines)


class ResponseSession:
    """Line list and page cursor for one capture/generate cycle.

    Fragments arrive from the generation stream while tap events may arrive
    from another thread, so every operation runs under a single lock and no
    caller observes a half-applied append or move.
    """

    def __init__(self, page_size: int = 5) -> None:
        self._lock = threading.RLock()
        self._assembler = TextAssembler()
        self._paginator = Paginator(self._assembler, page_size)

    @property
    def page_size(self) -> int:
        return self._paginator.page_size

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._paginator.cursor

    @property
    def page_count(self) -> int:
        with self._lock:
            return self._paginator.page_count

    def reset(self) -> None:
        """Clear the session. Only valid while no stream is in flight."""
        with self._lock:
            self._assembler.reset()
            self._paginator.reset()

    def append_fragment(self, fragment: str) -> AppendResult:
        """Append a streamed fragment and update the page view."""
        with self._lock:
            result = self._assembler.append_fragment(fragment)
            self._paginator.apply(result)
            return result

    def append_line(self, text: str) -> AppendResult:
        """Append text as a line of its own.

        Used for in-band messages such as errors, which must not be glued
        onto a partially streamed line.
        """
        with self._lock:
            if len(self._assembler):
                text = "\n" + text
            return self.append_fragment(text)

    def next_page(self) -> bool:
        with self._lock:
            return self._paginator.next_page()

    def previous_page(self) -> bool:
        with self._lock:
            return self._paginator.previous_page()

    def current_page(self) -> tuple[str, ...]:
        with self._lock:
            return self._paginator.current_page()

    def page_text(self) -> str:
        """Current page joined with newlines."""
        return "\n".join(self.current_page())

    def lines(self) -> tuple[str, ...]:
        with self._lock:
            return self._assembler.current_lines()

    def text(self) -> str:
        with self._lock:
            return self._assembler.text()

    def snapshot(self) -> PageView:
        """Take a consistent view of page, cursor and counts."""
        with self._lock:
            return PageView(
                lines=self._paginator.current_page(),
                cursor=self._paginator.cursor,
                page_count=self._paginator.page_count,
                line_count=self._paginator.line_count,
            )
