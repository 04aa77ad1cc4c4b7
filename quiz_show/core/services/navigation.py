"""Browser location codec and the server half of the navigation surface.

The presentation page owns the real browser history. It reports every
location change to the server (first load, its own ``pushState`` writes,
back/forward) and picks up location writes requested by the sequencer.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
import re
from urllib.parse import parse_qs, quote, unquote, urlsplit

from quiz_show.core.models import NavigationEvent, NavigationLocation

logger = logging.getLogger(__name__)

NavigationListener = Callable[[NavigationEvent], Awaitable[None]]

_PLAY_PATH = re.compile(
    r"^/quiz/(?P<round>[^/]+)/play"
    r"(?:/question/(?P<question>[^/]*)/step/(?P<step>[^/]*))?/?$"
)


class LocationDecodeError(ValueError):
    """Raised for locations that do not address a presentation step."""


def encode_location(location: NavigationLocation) -> str:
    round_segment = quote(location.round_id, safe="")
    return (
        f"/quiz/{round_segment}/play"
        f"?question={location.question_index}&step={location.step_index}"
    )


def _parse_index(raw_value: str | None) -> int:
    if raw_value is None:
        return 0
    try:
        return int(raw_value)
    except ValueError:
        return 0


def decode_location(url: str) -> NavigationLocation:
    """Decode a play URL (absolute or path-only) into a location.

    Accepts the canonical query form and the older path form
    ``/quiz/<round>/play/question/<q>/step/<s>``. Missing or non-numeric
    indices decode to 0; range checks are left to the sequencer.
    """
    parts = urlsplit(url)
    match = _PLAY_PATH.match(parts.path)
    if not match:
        raise LocationDecodeError(f"Not a presentation location: '{url}'")
    round_id = unquote(match.group("round"))
    if match.group("question") is not None:
        question_raw = match.group("question")
        step_raw = match.group("step")
    else:
        query = parse_qs(parts.query)
        question_raw = query.get("question", [None])[0]
        step_raw = query.get("step", [None])[0]
    return NavigationLocation(
        round_id=round_id,
        question_index=_parse_index(question_raw),
        step_index=_parse_index(step_raw),
    )


@dataclass(frozen=True, slots=True)
class NavigationWrite:
    """A location the sequencer asked the browser to push."""

    token: int
    location: NavigationLocation

    @property
    def url(self) -> str:
        return encode_location(self.location)


class NavigationSurface:
    """Server-side view of the page's address bar."""

    def __init__(self) -> None:
        self._listeners: list[NavigationListener] = []
        self._current: NavigationLocation | None = None
        self._latest_write: NavigationWrite | None = None

    def current(self) -> NavigationLocation | None:
        """Last location reported by, or written to, the page."""
        return self._current

    def latest_write(self) -> NavigationWrite | None:
        return self._latest_write

    def subscribe(self, listener: NavigationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def write(self, location: NavigationLocation, token: int) -> NavigationWrite:
        """Queue a location for the page to push, tagged with ``token``."""
        write = NavigationWrite(token=token, location=location)
        self._latest_write = write
        self._current = location
        logger.debug("Navigation write #%d -> %s", token, write.url)
        return write

    def clear(self) -> None:
        self._latest_write = None
        self._current = None

    async def report(
        self,
        location: NavigationLocation,
        token: int | None = None,
        initial: bool = False,
    ) -> None:
        """Deliver a location change observed in the browser to all listeners."""
        self._current = location
        event = NavigationEvent(location=location, token=token, initial=initial)
        for listener in list(self._listeners):
            await listener(event)
