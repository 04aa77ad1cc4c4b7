"""Fakes and builders shared by the test modules."""

from quiz_show.core.models import Answer, LightingMode, Question, Round
from quiz_show.core.reveal_sequencer import RevealSequencer
from quiz_show.core.services.cue_board import CueBoard
from quiz_show.core.services.device_actuator import DeviceActuator
from quiz_show.core.services.navigation import NavigationSurface
from quiz_show.core.services.round_repository import RoundRepository


class RecordingActuator(DeviceActuator):
    """Accepts every mode and remembers the order of requests."""

    def __init__(self, accept: bool = True) -> None:
        self.modes: list[LightingMode] = []
        self.accept = accept
        self.closed = False

    async def set_mode(self, mode: LightingMode) -> bool:
        self.modes.append(mode)
        return self.accept

    async def aclose(self) -> None:
        self.closed = True


class BrokenActuator(DeviceActuator):
    """Simulates a controller client that blows up unexpectedly."""

    def __init__(self) -> None:
        self.calls = 0

    async def set_mode(self, mode: LightingMode) -> bool:
        self.calls += 1
        raise RuntimeError("lighting rig unplugged")


def make_question(
    question_id: str,
    round_id: str | None,
    order: int,
    correct: int | None = None,
    answer_count: int = 3,
) -> Question:
    return Question(
        id=question_id,
        text=f"Question {question_id}",
        order=order,
        round_id=round_id,
        answers=[
            Answer(
                id=f"{question_id}-{index}",
                text=f"Answer {index}",
                is_correct=(index == correct),
                order=index,
            )
            for index in range(answer_count)
        ],
        explanation=f"Because of {question_id}",
    )


def build_repository(*rounds_with_questions: tuple[Round, list[Question]]) -> RoundRepository:
    repository = RoundRepository()
    rounds = [round_ for round_, _ in rounds_with_questions]
    questions = [q for _, questions in rounds_with_questions for q in questions]
    repository.load(rounds, questions)
    return repository


class SequencerHarness:
    """Sequencer plus the fakes it talks to; build inside a running loop."""

    def __init__(self, repository: RoundRepository, actuator: DeviceActuator | None = None) -> None:
        self.repository = repository
        self.actuator = actuator or RecordingActuator()
        self.cues = CueBoard()
        self.navigation = NavigationSurface()
        self.sequencer = RevealSequencer(
            content_store=repository,
            actuator=self.actuator,
            cue_board=self.cues,
            navigation=self.navigation,
            blink_interval_ms=10,
        )

    async def settle(self) -> None:
        await self.sequencer.wait_for_actuations()

    async def echo_latest_write(self) -> None:
        """Report the last location write back, as the page does after pushState."""
        write = self.navigation.latest_write()
        await self.navigation.report(write.location, write.token)
