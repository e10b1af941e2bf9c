"""Incremental assembly of streamed text fragments into lines."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AppendResult:
    """Outcome of appending one fragment."""

    appended: tuple[str, ...]
    first_index: int
    last_line_updated: bool

    @property
    def count(self) -> int:
        """Number of lines appended."""
        return len(self.appended)


class TextAssembler:
    """Merges arbitrarily chunked fragments into an ordered list of lines.

    A newline in a fragment is a hard line break. Otherwise consecutive
    fragments concatenate within the same line, so joining the lines with
    ``"\\n"`` always reproduces the concatenation of every fragment received.

    Example:
        assembler = TextAssembler()
        assembler.append_fragment("Hello ")
        assembler.append_fragment("world\\nSecond")
        assembler.current_lines()  # ("Hello world", "Second")
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    def __len__(self) -> int:
        return len(self._lines)

    def reset(self) -> None:
        """Clear the line list."""
        self._lines.clear()

    def append_fragment(self, fragment: str) -> AppendResult:
        """Append a fragment.

        Args:
            fragment: Raw text as delivered by the generation stream.

        Returns:
            Which lines were appended and whether the last line changed.
        """
        parts = fragment.split("\n")

        if not self._lines:
            self._lines.extend(parts)
            return AppendResult(
                appended=tuple(parts),
                first_index=0,
                last_line_updated=False,
            )

        head, rest = parts[0], parts[1:]
        updated = head != ""
        if updated:
            self._lines[-1] += head

        first_index = len(self._lines)
        self._lines.extend(rest)

        return AppendResult(
            appended=tuple(rest),
            first_index=first_index,
            last_line_updated=updated,
        )

    def current_lines(self) -> tuple[str, ...]:
        """Get an immutable snapshot of the lines."""
        return tuple(self._lines)

    def lines(self, start: int, end: int) -> tuple[str, ...]:
        """Get the lines in [start, end) without copying the rest."""
        return tuple(self._lines[start:end])

    def text(self) -> str:
        """Get the full accumulated text."""
        return "\n".join(self._lines)
