"""Step boundaries for presenting a single question.

A question with ``n`` visible answers (``n`` capped at three) is presented as::

    0            intro
    1            question text
    2 .. 1+n     reveal answer k (k = 1..n)
    2+n          blink (suspense)
    3+n          correct answer highlight
    4+n          explanation

With no answers the reveal range is empty and the layout collapses to
intro, question, blink, correct, explanation.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from quiz_show.constants.show_constants import MAX_ANSWERS
from quiz_show.core.models import Answer, Question, RevealPosition, StepKind

logger = logging.getLogger(__name__)

INTRO_STEP = 0
QUESTION_STEP = 1
FIRST_ANSWER_STEP = 2


def _order_key(answer: Answer) -> tuple[bool, int]:
    # Answers without an order sort last, keeping their stored sequence.
    return (answer.order is None, answer.order or 0)


def visible_answers(question: Question) -> list[Answer]:
    """Return the answers the sequencer works with: first three by ``order``."""
    ordered = sorted(question.answers, key=_order_key)
    if len(ordered) > MAX_ANSWERS:
        logger.warning(
            "Question %s stores %d answers; dropping %d beyond the first %d",
            question.id,
            len(ordered),
            len(ordered) - MAX_ANSWERS,
            MAX_ANSWERS,
        )
    return ordered[:MAX_ANSWERS]


def correct_answer_index(answers: list[Answer]) -> int | None:
    """Index of the first answer flagged correct, or None."""
    return next((i for i, answer in enumerate(answers) if answer.is_correct), None)


@dataclass(frozen=True, slots=True)
class StepLayout:
    """Step numbering derived from the visible answer count."""

    max_answers: int

    @classmethod
    def for_answer_count(cls, answer_count: int) -> StepLayout:
        return cls(max(0, min(answer_count, MAX_ANSWERS)))

    @property
    def last_answer_step(self) -> int:
        return FIRST_ANSWER_STEP + self.max_answers - 1

    @property
    def blink_step(self) -> int:
        return FIRST_ANSWER_STEP + self.max_answers

    @property
    def correct_step(self) -> int:
        return self.blink_step + 1

    @property
    def explanation_step(self) -> int:
        return self.correct_step + 1

    @property
    def max_step(self) -> int:
        return self.explanation_step

    def clamp(self, step_index: int) -> int:
        return max(0, min(step_index, self.max_step))

    def kind_of(self, step_index: int) -> StepKind | None:
        """Classify a step; None for steps outside the layout."""
        if step_index == INTRO_STEP:
            return StepKind.INTRO
        if step_index == QUESTION_STEP:
            return StepKind.QUESTION
        if FIRST_ANSWER_STEP <= step_index <= self.last_answer_step:
            return StepKind.REVEAL_ANSWER
        if step_index == self.blink_step:
            return StepKind.BLINK
        if step_index == self.correct_step:
            return StepKind.CORRECT
        if step_index == self.explanation_step:
            return StepKind.EXPLANATION
        return None

    def answer_number(self, step_index: int) -> int | None:
        """1-based number of the answer revealed at ``step_index``."""
        if FIRST_ANSWER_STEP <= step_index <= self.last_answer_step:
            return step_index - FIRST_ANSWER_STEP + 1
        return None

    def revealed_answer_count(self, step_index: int) -> int:
        """How many answers are on screen at ``step_index``."""
        if step_index < FIRST_ANSWER_STEP:
            return 0
        return min(step_index - FIRST_ANSWER_STEP + 1, self.max_answers)


def clamp_position(questions: list[Question], position: RevealPosition) -> RevealPosition:
    """Clamp a possibly hand-edited position into the round's valid range."""
    if not questions:
        return RevealPosition(0, 0)
    question_index = max(0, min(position.question_index, len(questions) - 1))
    layout = StepLayout.for_answer_count(len(questions[question_index].answers))
    return RevealPosition(question_index, layout.clamp(position.step_index))
