"""SDK Display API - wearable display and phone screen."""

from __future__ import annotations

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from framevision.common.events import PAGE_CHANGED, RESPONSE_UPDATED, Event, EventBus
from framevision.common.logging import get_logger


class FrameDisplay:
    """Abstract wearable display."""

    async def send_text(self, text: str, msg_code: int = 0x0A) -> None:
        """Send a block of text to the display."""
        raise NotImplementedError


class ConsoleFrameDisplay(FrameDisplay):
    """Renders what the wearable would show in a terminal panel."""

    def __init__(self, console: Console | None = None, width: int = 32) -> None:
        self.console = console or Console()
        self.width = width
        self.logger = get_logger("sdk.display")

    async def send_text(self, text: str, msg_code: int = 0x0A) -> None:
        self.logger.debug("display_send", msg_code=msg_code, length=len(text))
        self.console.print(
            Panel(
                Text(text),
                title="Frame",
                width=self.width + 4,
                border_style="cyan",
            )
        )


class PhoneScreen:
    """Host screen listing the whole response, one row per line.

    The listing redraws in place while a response streams and is left on
    screen once the final update arrives.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.lines: tuple[str, ...] = ()
        self.page_label = ""
        self._live: Live | None = None
        self._unsubscribe: list = []

    @property
    def streaming(self) -> bool:
        """Whether a live listing is on screen."""
        return self._live is not None

    def attach(self, bus: EventBus) -> None:
        """Subscribe to response and page updates."""
        self._unsubscribe = [
            bus.subscribe(RESPONSE_UPDATED, self._on_response),
            bus.subscribe(PAGE_CHANGED, self._on_page),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self._stop()

    async def _on_response(self, event: Event) -> None:
        self.lines = tuple(event.data.get("lines", ()))
        self._on_page_data(event)
        self.render(final=bool(event.data.get("final")))

    async def _on_page(self, event: Event) -> None:
        self._on_page_data(event)
        if self._live is not None:
            self._live.update(self.renderable(), refresh=True)
        else:
            self.console.print(f"[dim]{self.page_label}[/]")

    def _on_page_data(self, event: Event) -> None:
        if "page_count" in event.data:
            self.page_label = f"page {event.data['cursor'] + 1}/{event.data['page_count']}"

    def renderable(self) -> Group:
        return Group(
            Rule("Response"),
            *(Text(line) for line in self.lines),
            Rule(self.page_label),
        )

    def render(self, final: bool = True) -> None:
        """Redraw the response, leaving it in place when final."""
        if self._live is None:
            self._live = Live(
                self.renderable(),
                console=self.console,
                auto_refresh=False,
                redirect_stdout=False,
                redirect_stderr=False,
            )
            self._live.start()
        self._live.update(self.renderable(), refresh=True)
        if final:
            self._stop()

    def _stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
