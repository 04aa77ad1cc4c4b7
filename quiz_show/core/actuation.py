"""Mapping from reveal steps to lighting controller modes."""

from __future__ import annotations

from quiz_show.core.models import LightingMode, StepKind
from quiz_show.core.step_layout import StepLayout

_ANSWER_MODES = (LightingMode.ONE, LightingMode.TWO, LightingMode.THREE)


def _mode_for_answer_number(number: int, max_answers: int) -> LightingMode:
    # Numbers beyond the visible set fall back to the highest visible answer.
    capped = min(number, max_answers, len(_ANSWER_MODES))
    if capped < 1:
        return LightingMode.OFF
    return _ANSWER_MODES[capped - 1]


def lighting_mode_for_step(
    step_index: int,
    max_answers: int,
    correct_answer_index: int | None,
) -> LightingMode:
    """Return the lighting mode for a step of a question with ``max_answers`` answers."""
    layout = StepLayout.for_answer_count(max_answers)
    kind = layout.kind_of(step_index)

    if kind is StepKind.REVEAL_ANSWER:
        return _mode_for_answer_number(layout.answer_number(step_index), layout.max_answers)
    if kind is StepKind.BLINK:
        return LightingMode.BLINK
    if kind is StepKind.CORRECT:
        if correct_answer_index is None or correct_answer_index < 0:
            return LightingMode.OFF
        return _mode_for_answer_number(correct_answer_index + 1, layout.max_answers)
    return LightingMode.OFF
