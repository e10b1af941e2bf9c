"""Tests for pagination and the response session."""

import random
import threading

import pytest

from framevision.core import ConfigurationError, Paginator, ResponseSession, TextAssembler


def feed(paginator: Paginator, assembler: TextAssembler, *fragments: str) -> None:
    for fragment in fragments:
        paginator.apply(assembler.append_fragment(fragment))


class TestPaginator:
    """Tests for Paginator class."""

    @pytest.mark.parametrize("page_size", [0, -1])
    def test_invalid_page_size(self, page_size: int):
        """Test a non-positive page size is rejected at construction."""
        with pytest.raises(ConfigurationError):
            Paginator(TextAssembler(), page_size)

    def test_empty_session(self):
        """Test an empty session has one empty page."""
        paginator = Paginator(TextAssembler(), 5)

        assert paginator.page_count == 1
        assert paginator.current_page() == ()
        assert not paginator.next_page()
        assert not paginator.previous_page()
        assert paginator.cursor == 0

    def test_fragments_on_one_page(self):
        """Test streamed words end up on a single page."""
        assembler = TextAssembler()
        paginator = Paginator(assembler, 2)
        feed(paginator, assembler, "Hello ", "world", "\nSecond line")

        assert paginator.page_count == 1
        assert paginator.current_page() == ("Hello world", "Second line")

    def test_auto_follow_then_previous(self):
        """Test the cursor follows new pages and can move back."""
        assembler = TextAssembler()
        paginator = Paginator(assembler, 2)
        feed(paginator, assembler, "a\nb\nc\nd\ne")

        assert paginator.page_count == 3
        assert paginator.cursor == 2
        assert paginator.current_page() == ("e",)

        assert paginator.previous_page()
        assert paginator.current_page() == ("c", "d")

    def test_empty_fragment_page(self):
        """Test an empty first fragment yields one empty line."""
        assembler = TextAssembler()
        paginator = Paginator(assembler, 5)
        feed(paginator, assembler, "")

        assert paginator.page_count == 1
        assert paginator.current_page() == ("",)

    def test_no_follow_when_reviewing_history(self):
        """Test a cursor on an earlier page stays put when lines arrive."""
        assembler = TextAssembler()
        paginator = Paginator(assembler, 2)
        feed(paginator, assembler, "a\nb\nc")
        paginator.previous_page()

        feed(paginator, assembler, "\nd\ne\nf")

        assert paginator.cursor == 0
        assert paginator.current_page() == ("a", "b")
        assert paginator.page_count == 3

    def test_follow_uses_pre_update_last_page(self):
        """Test the cursor follows when it was on the old last page."""
        assembler = TextAssembler()
        paginator = Paginator(assembler, 2)
        feed(paginator, assembler, "a\nb")
        assert paginator.cursor == 0

        feed(paginator, assembler, "\nc\nd\ne")

        assert paginator.cursor == 2
        assert paginator.current_page() == ("e",)

    def test_last_line_update_visibility(self):
        """Test in-place edits report whether the current page shows them."""
        assembler = TextAssembler()
        paginator = Paginator(assembler, 2)
        feed(paginator, assembler, "a\nb\nc")

        assert paginator.apply(assembler.append_fragment("c"))
        paginator.previous_page()
        assert not paginator.apply(assembler.append_fragment("c"))
        assert paginator.cursor == 0

    def test_current_page_idempotent(self):
        """Test reading a page twice gives the same result."""
        assembler = TextAssembler()
        paginator = Paginator(assembler, 3)
        feed(paginator, assembler, "one\ntwo\nthree\nfour")

        assert paginator.current_page() == paginator.current_page()

    def test_current_page_reads_only_its_lines(self):
        """Test building a page does not snapshot the full line list."""

        class RangeOnlyAssembler(TextAssembler):
            def current_lines(self):
                raise AssertionError("full snapshot taken")

        assembler = RangeOnlyAssembler()
        paginator = Paginator(assembler, 2)
        paginator.apply(assembler.append_fragment("a\nb\nc\nd\ne"))

        assert paginator.current_page() == ("e",)
        paginator.previous_page()
        assert paginator.current_page() == ("c", "d")

    def test_negative_count(self):
        """Test a negative line count is a programming error."""
        paginator = Paginator(TextAssembler(), 2)
        with pytest.raises(ValueError):
            paginator.on_lines_appended(-1)

    def test_reset(self):
        """Test reset returns to the empty state."""
        assembler = TextAssembler()
        paginator = Paginator(assembler, 2)
        feed(paginator, assembler, "a\nb\nc\nd\ne")
        assembler.reset()
        paginator.reset()

        assert paginator.cursor == 0
        assert paginator.page_count == 1
        assert paginator.current_page() == ()

    @pytest.mark.parametrize("seed", range(20))
    def test_navigation_bounds(self, seed: int):
        """Test repeated moves converge to the first and last page."""
        rng = random.Random(seed)
        assembler = TextAssembler()
        paginator = Paginator(assembler, rng.randint(1, 4))
        feed(paginator, assembler, "\n".join("x" * rng.randint(0, 3) for _ in range(rng.randint(0, 20))))

        for _ in range(paginator.page_count + 2):
            paginator.next_page()
            assert 0 <= paginator.cursor < paginator.page_count
        assert paginator.cursor == paginator.page_count - 1

        for _ in range(paginator.page_count + 2):
            paginator.previous_page()
            assert 0 <= paginator.cursor < paginator.page_count
        assert paginator.cursor == 0

    @pytest.mark.parametrize("seed", range(30))
    def test_auto_follow_property(self, seed: int):
        """Test the follow rule over random appends and moves."""
        rng = random.Random(seed)
        assembler = TextAssembler()
        paginator = Paginator(assembler, rng.randint(1, 3))

        for _ in range(50):
            action = rng.random()
            if action < 0.2:
                paginator.next_page()
            elif action < 0.4:
                paginator.previous_page()
            else:
                old_last = paginator.page_count - 1
                old_cursor = paginator.cursor
                result = assembler.append_fragment("\n" * rng.randint(0, 4))
                paginator.on_lines_appended(result.count)

                if old_cursor == old_last:
                    assert paginator.cursor == paginator.page_count - 1
                else:
                    assert paginator.cursor == old_cursor

            assert paginator.line_count == len(assembler)


class TestResponseSession:
    """Tests for ResponseSession class."""

    def test_append_and_navigate(self):
        """Test the session keeps assembler and pager in step."""
        session = ResponseSession(page_size=2)
        session.append_fragment("a\nb\nc\nd\ne")

        view = session.snapshot()
        assert view.lines == ("e",)
        assert view.cursor == 2
        assert view.page_count == 3
        assert view.line_count == 5

        session.previous_page()
        assert session.page_text() == "c\nd"

    def test_append_line_starts_new_line(self):
        """Test in-band messages never join a partial line."""
        session = ResponseSession(page_size=5)
        session.append_fragment("partial")
        session.append_line("Error processing photo: boom")

        assert session.lines() == ("partial", "Error processing photo: boom")

    def test_append_line_on_empty_session(self):
        """Test an in-band message on an empty session is the only line."""
        session = ResponseSession(page_size=5)
        session.append_line("Error processing photo: boom")

        assert session.lines() == ("Error processing photo: boom",)

    def test_reset(self):
        """Test reset clears lines and cursor."""
        session = ResponseSession(page_size=1)
        session.append_fragment("a\nb\nc")
        session.reset()

        assert session.lines() == ()
        assert session.cursor == 0
        assert session.current_page() == ()

    def test_invalid_page_size(self):
        """Test the session rejects a non-positive page size."""
        with pytest.raises(ConfigurationError):
            ResponseSession(page_size=0)

    def test_concurrent_append_and_navigation(self):
        """Test appends and page moves from different threads stay consistent."""
        session = ResponseSession(page_size=3)
        fragments = [f"line {i}\n" for i in range(300)]
        bad_views = []

        def writer() -> None:
            for fragment in fragments:
                session.append_fragment(fragment)

        def reader() -> None:
            for i in range(300):
                if i % 2:
                    session.next_page()
                else:
                    session.previous_page()
                view = session.snapshot()
                if not 0 <= view.cursor < view.page_count or len(view.lines) > 3:
                    bad_views.append(view)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert session.text() == "".join(fragments)
        assert len(session.lines()) == 301
        assert bad_views == []
