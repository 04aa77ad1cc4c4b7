"""Domain models for the quiz show."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LightingMode(str, Enum):
    """Commands understood by the lighting controller."""

    OFF = "OFF"
    ONE = "ONE"
    TWO = "TWO"
    THREE = "THREE"
    BLINK = "BLINK"
    ALL = "ALL"  # manual override only, never produced by the sequencer


class AudioCue(str, Enum):
    """Sound effects the presentation page knows how to play."""

    REVEAL_1 = "REVEAL_1"
    REVEAL_2 = "REVEAL_2"
    REVEAL_3 = "REVEAL_3"
    BLINK_LOOP = "BLINK_LOOP"
    CORRECT = "CORRECT"


class StepKind(str, Enum):
    """Stage of a question presentation."""

    INTRO = "intro"
    QUESTION = "question"
    REVEAL_ANSWER = "reveal_answer"
    BLINK = "blink"
    CORRECT = "correct"
    EXPLANATION = "explanation"


class SequencerStatus(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    FINISHED = "finished"


class PositionOrigin(Enum):
    """Who asked for a position change."""

    INTERNAL = "internal"
    EXTERNAL = "external"


@dataclass(slots=True)
class Answer:
    """One selectable answer of a question."""

    id: str
    text: str
    is_correct: bool = False
    order: int | None = None


@dataclass(slots=True)
class Question:
    """Question with its answers, as stored (answers may exceed the display cap)."""

    id: str
    text: str
    order: int
    answers: list[Answer] = field(default_factory=list)
    round_id: str | None = None  # None means "unassigned"
    introduction: str = ""
    category: str = ""
    explanation: str | None = None
    explanation_image: str | None = None


@dataclass(slots=True)
class Round:
    """Named collection of ordered questions sharing an audio/background theme."""

    id: str
    name: str
    order: int
    audio_path: str | None = None
    background_image_path: str | None = None


@dataclass(frozen=True, slots=True)
class RevealPosition:
    """Current place in a round: which question and which reveal step."""

    question_index: int = 0
    step_index: int = 0

    def as_tuple(self) -> tuple[int, int]:
        return (self.question_index, self.step_index)


@dataclass(frozen=True, slots=True)
class NavigationLocation:
    """Decoded address of a presentation step."""

    round_id: str
    question_index: int = 0
    step_index: int = 0

    @property
    def position(self) -> RevealPosition:
        return RevealPosition(self.question_index, self.step_index)


@dataclass(frozen=True, slots=True)
class NavigationEvent:
    """A location change observed on the navigation surface.

    ``token`` is the write token stored with the history entry, if the
    browser had one. Address-bar edits and first loads carry ``None``.
    ``initial`` marks the first report of a freshly loaded page.
    """

    location: NavigationLocation
    token: int | None = None
    initial: bool = False
