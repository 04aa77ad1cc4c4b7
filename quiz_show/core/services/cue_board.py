"""Service collecting audio cue events for the presentation page."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from quiz_show.constants.show_constants import CUE_BOARD_CAPACITY
from quiz_show.core.models import AudioCue


class CueAction(str, Enum):
    PLAY = "play"
    STOP = "stop"


@dataclass(frozen=True, slots=True)
class CueEvent:
    """A single play/stop instruction for the page's audio elements."""

    sequence: int
    cue: AudioCue
    action: CueAction
    issued_at: datetime


class CueBoard:
    """Bounded, sequence-numbered log of cue events.

    The page reads incrementally with :meth:`events_since`; events older than
    the capacity are forgotten, which only loses stale sounds.
    """

    def __init__(self, capacity: int = CUE_BOARD_CAPACITY) -> None:
        self._events: deque[CueEvent] = deque(maxlen=capacity)
        self._sequence: int = 0

    def play(self, cue: AudioCue) -> CueEvent:
        return self._append(cue, CueAction.PLAY)

    def stop(self, cue: AudioCue) -> CueEvent:
        return self._append(cue, CueAction.STOP)

    def events_since(self, sequence: int) -> list[CueEvent]:
        return [event for event in self._events if event.sequence > sequence]

    def get_sequence(self) -> int:
        return self._sequence

    def played(self) -> list[AudioCue]:
        """Cues played so far, oldest first."""
        return [event.cue for event in self._events if event.action is CueAction.PLAY]

    def _append(self, cue: AudioCue, action: CueAction) -> CueEvent:
        self._sequence += 1
        event = CueEvent(
            sequence=self._sequence,
            cue=cue,
            action=action,
            issued_at=datetime.now(),
        )
        self._events.append(event)
        return event
