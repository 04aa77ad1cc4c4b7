import pytest

from helpers import build_repository, make_question
from quiz_show.core.models import Round
from quiz_show.core.services.round_repository import RoundRepository


@pytest.fixture
def two_answer_round() -> RoundRepository:
    """One question with answers [wrong, right]."""
    round_ = Round(id="r1", name="Round one", order=1)
    question = make_question("q1", "r1", order=0, correct=1, answer_count=2)
    return build_repository((round_, [question]))


@pytest.fixture
def three_question_round() -> RoundRepository:
    """Round r1 with three questions plus a second round r2."""
    round_ = Round(id="r1", name="Round one", order=1)
    questions = [
        make_question("q1", "r1", order=0, correct=0),
        make_question("q2", "r1", order=1, correct=2),
        make_question("q3", "r1", order=2, correct=None, answer_count=1),
    ]
    other = Round(id="r2", name="Round two", order=2)
    return build_repository(
        (round_, questions),
        (other, [make_question("q9", "r2", order=0, correct=1, answer_count=2)]),
    )
