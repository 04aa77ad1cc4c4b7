"""Unit tests for step boundaries and answer trimming."""

import logging

import pytest

from quiz_show.core.models import Answer, Question, RevealPosition, StepKind
from quiz_show.core.step_layout import (
    StepLayout,
    clamp_position,
    correct_answer_index,
    visible_answers,
)
from helpers import make_question


class TestStepLayout:
    """Tests for StepLayout numbering."""

    def test_layout_when_three_answers_then_blink_correct_explanation_follow_reveals(self):
        layout = StepLayout.for_answer_count(3)
        assert layout.last_answer_step == 4
        assert layout.blink_step == 5
        assert layout.correct_step == 6
        assert layout.explanation_step == 7
        assert layout.max_step == 7

    def test_kind_of_when_two_answers_then_matches_layout(self):
        layout = StepLayout.for_answer_count(2)
        kinds = [layout.kind_of(step) for step in range(layout.max_step + 1)]
        assert kinds == [
            StepKind.INTRO,
            StepKind.QUESTION,
            StepKind.REVEAL_ANSWER,
            StepKind.REVEAL_ANSWER,
            StepKind.BLINK,
            StepKind.CORRECT,
            StepKind.EXPLANATION,
        ]

    def test_kind_of_when_no_answers_then_minimal_layout_without_reveals(self):
        """A question without answers never has a reveal step."""
        layout = StepLayout.for_answer_count(0)
        assert layout.max_step == 4
        kinds = [layout.kind_of(step) for step in range(layout.max_step + 1)]
        assert kinds == [
            StepKind.INTRO,
            StepKind.QUESTION,
            StepKind.BLINK,
            StepKind.CORRECT,
            StepKind.EXPLANATION,
        ]
        assert all(layout.answer_number(step) is None for step in range(10))

    def test_for_answer_count_when_more_than_three_then_capped(self):
        assert StepLayout.for_answer_count(5).max_answers == 3

    @pytest.mark.parametrize("step, expected", [(-4, 0), (0, 0), (5, 5), (7, 7), (99, 7)])
    def test_clamp_when_out_of_range_then_pulled_into_layout(self, step, expected):
        assert StepLayout.for_answer_count(3).clamp(step) == expected

    def test_kind_of_when_past_layout_then_none(self):
        assert StepLayout.for_answer_count(1).kind_of(6) is None

    def test_revealed_answer_count_when_past_reveals_then_all_visible(self):
        layout = StepLayout.for_answer_count(2)
        assert [layout.revealed_answer_count(step) for step in range(7)] == [0, 0, 1, 2, 2, 2, 2]


class TestVisibleAnswers:
    """Tests for answer ordering and the three-answer cap."""

    def test_visible_answers_when_five_stored_then_first_three_by_order_and_logged(self, caplog):
        question = Question(
            id="legacy",
            text="Old question",
            order=0,
            answers=[
                Answer(id=f"a{order}", text=f"Answer {order}", order=order)
                for order in (4, 2, 0, 3, 1)
            ],
        )
        with caplog.at_level(logging.WARNING):
            answers = visible_answers(question)
        assert [answer.order for answer in answers] == [0, 1, 2]
        assert "dropping 2" in caplog.text

    def test_visible_answers_when_order_missing_then_sorted_last(self):
        question = Question(
            id="q",
            text="Q",
            order=0,
            answers=[
                Answer(id="x", text="X", order=None),
                Answer(id="y", text="Y", order=1),
            ],
        )
        assert [answer.id for answer in visible_answers(question)] == ["y", "x"]

    def test_correct_answer_index_when_none_marked_then_none(self):
        question = make_question("q", "r", order=0, correct=None)
        assert correct_answer_index(question.answers) is None

    def test_correct_answer_index_when_marked_then_position(self):
        question = make_question("q", "r", order=0, correct=2)
        assert correct_answer_index(question.answers) == 2


class TestClampPosition:
    """Tests for clamping hand-edited positions."""

    def test_clamp_position_when_question_beyond_round_then_last_question(self):
        questions = [
            make_question("q1", "r", order=0, answer_count=3),
            make_question("q2", "r", order=1, answer_count=1),
        ]
        assert clamp_position(questions, RevealPosition(9, 99)) == RevealPosition(1, 5)

    def test_clamp_position_when_negative_then_origin(self):
        questions = [make_question("q1", "r", order=0)]
        assert clamp_position(questions, RevealPosition(-1, -1)) == RevealPosition(0, 0)

    def test_clamp_position_when_no_questions_then_origin(self):
        assert clamp_position([], RevealPosition(3, 3)) == RevealPosition(0, 0)
