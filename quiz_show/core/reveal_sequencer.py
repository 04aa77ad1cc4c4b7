"""Reveal sequencing engine driving the live presentation.

The sequencer owns the position within a round (question index, reveal step)
and derives everything else from it: the lighting mode, one-shot sound cues
and the blink sweep. All position changes go through :meth:`set_position`.

Position and browser location are kept in sync in both directions. Writes
initiated here are tagged with a write token; when the page reports an
outstanding write back with its token, the report is an echo and is dropped.
The first report of a freshly loaded page is a resume: it never plays cues. Any other report is a genuine navigation and is applied with
``PositionOrigin.EXTERNAL``, which never writes back.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field, replace
import logging

from quiz_show.constants.show_constants import BLINK_INTERVAL_MS, SELF_WRITE_MEMORY
from quiz_show.core.actuation import lighting_mode_for_step
from quiz_show.core.models import (
    AudioCue,
    LightingMode,
    NavigationEvent,
    NavigationLocation,
    PositionOrigin,
    Question,
    RevealPosition,
    Round,
    SequencerStatus,
    StepKind,
)
from quiz_show.core.services.blink_sequencer import BlinkSequencer
from quiz_show.core.services.cue_board import CueBoard
from quiz_show.core.services.device_actuator import DeviceActuator
from quiz_show.core.services.navigation import NavigationSurface, NavigationWrite
from quiz_show.core.services.round_repository import ContentStoreError, RoundRepository
from quiz_show.core.step_layout import (
    StepLayout,
    clamp_position,
    correct_answer_index,
    visible_answers,
)

logger = logging.getLogger(__name__)

_REVEAL_CUES = (AudioCue.REVEAL_1, AudioCue.REVEAL_2, AudioCue.REVEAL_3)


@dataclass(slots=True)
class SequencerSession:
    """State of one opened round."""

    round_id: str
    round: Round | None = None
    questions: list[Question] = field(default_factory=list)
    position: RevealPosition = field(default_factory=RevealPosition)
    status: SequencerStatus = SequencerStatus.LOADING
    load_error: str | None = None
    lighting_mode: LightingMode = LightingMode.OFF
    positioned: bool = False
    mutation_count: int = 0
    self_writes: deque[NavigationWrite] = field(
        default_factory=lambda: deque(maxlen=SELF_WRITE_MEMORY)
    )

    @property
    def finished(self) -> bool:
        return self.status is SequencerStatus.FINISHED

    @property
    def current_question(self) -> Question | None:
        if self.status is not SequencerStatus.ACTIVE or not self.questions:
            return None
        return self.questions[self.position.question_index]

    @property
    def layout(self) -> StepLayout:
        question = self.current_question
        return StepLayout.for_answer_count(len(question.answers) if question else 0)

    @property
    def step_kind(self) -> StepKind | None:
        if self.current_question is None:
            return None
        return self.layout.kind_of(self.position.step_index)

    def location(self) -> NavigationLocation:
        return NavigationLocation(
            round_id=self.round_id,
            question_index=self.position.question_index,
            step_index=self.position.step_index,
        )


class RevealSequencer:
    """Owns the presentation position and issues its side effects."""

    def __init__(
        self,
        content_store: RoundRepository,
        actuator: DeviceActuator,
        cue_board: CueBoard,
        navigation: NavigationSurface,
        blink_interval_ms: int = BLINK_INTERVAL_MS,
    ) -> None:
        self._content_store = content_store
        self._actuator = actuator
        self._cue_board = cue_board
        self._navigation = navigation
        self._blink = BlinkSequencer(interval_ms=blink_interval_ms)
        self._lock = asyncio.Lock()
        self._session: SequencerSession | None = None
        self._write_token: int = 0
        self._actuation_generation: int = 0
        self._actuation_tasks: set[asyncio.Task[None]] = set()
        self._unsubscribe = navigation.subscribe(self.handle_navigation)

    # --- Read access ---

    @property
    def session(self) -> SequencerSession | None:
        return self._session

    @property
    def status(self) -> SequencerStatus | None:
        return self._session.status if self._session else None

    @property
    def mutation_count(self) -> int:
        return self._session.mutation_count if self._session else 0

    @property
    def blink_active(self) -> bool:
        return self._blink.is_running()

    @property
    def lit_index(self) -> int | None:
        """Answer currently lit by the blink sweep, if any."""
        if not self._blink.is_running():
            return None
        return self._blink.lit_index

    @property
    def blink(self) -> BlinkSequencer:
        return self._blink

    # --- Operations ---

    async def load_round(
        self,
        round_id: str,
        initial_position: RevealPosition | None = None,
    ) -> SequencerSession:
        """Open ``round_id`` and apply ``initial_position`` after clamping it."""
        async with self._lock:
            return await self._load_round(round_id, initial_position or RevealPosition())

    async def advance(self) -> None:
        """Move one step forward; past the last question the round finishes."""
        async with self._lock:
            session = self._session
            if session is None or session.status is not SequencerStatus.ACTIVE:
                logger.info("Advance ignored: no active round")
                return

            layout = session.layout
            position = session.position
            if layout.kind_of(position.step_index) is StepKind.BLINK:
                next_step = layout.correct_step
            else:
                next_step = position.step_index + 1

            if next_step <= layout.max_step:
                self._set_position(RevealPosition(position.question_index, next_step), PositionOrigin.INTERNAL)
                return

            next_question = position.question_index + 1
            if next_question >= len(session.questions):
                self._finish(session)
                return
            self._set_position(RevealPosition(next_question, 0), PositionOrigin.INTERNAL)

    def set_position(self, position: RevealPosition, origin: PositionOrigin) -> None:
        """Apply ``position`` to the active round.

        Synchronous so it cannot interleave with another mutation. Raises
        RuntimeError when no round is active.
        """
        session = self._session
        if session is None or session.status is not SequencerStatus.ACTIVE:
            raise RuntimeError("No active round to position.")
        self._set_position(position, origin)

    async def handle_navigation(self, event: NavigationEvent) -> None:
        """Reconcile a location change reported by the browser."""
        async with self._lock:
            location = event.location
            session = self._session

            if session is None or location.round_id != session.round_id:
                await self._load_round(location.round_id, location.position)
                return

            if event.initial:
                # A freshly loaded page never echoes writes made for the previous one.
                session.self_writes.clear()
            elif self._consume_echo(session, event):
                return

            if not session.questions:
                logger.info("Navigation ignored: round '%s' has nothing to present", session.round_id)
                return

            if session.status is SequencerStatus.FINISHED:
                logger.info("Reopening finished round '%s' at %s", session.round_id, location.position)
                session.status = SequencerStatus.ACTIVE
            if event.initial:
                logger.info("Resuming round '%s' at %s", session.round_id, location.position)
                session.positioned = False
            self._set_position(location.position, PositionOrigin.EXTERNAL)

    async def teardown(self) -> None:
        """Close the current round: stop the blink sweep and switch lights off."""
        async with self._lock:
            session = self._session
            if session is None:
                return
            logger.info("Tearing down round '%s'", session.round_id)
            self._stop_blink()
            self._session = None
            self._navigation.clear()
            self._actuation_generation += 1
            await self._actuate(LightingMode.OFF, self._actuation_generation)

    async def close(self) -> None:
        await self.teardown()
        self._unsubscribe()
        if self._actuation_tasks:
            await asyncio.gather(*self._actuation_tasks, return_exceptions=True)

    async def wait_for_actuations(self) -> None:
        """Wait for lighting requests issued so far to complete."""
        while self._actuation_tasks:
            await asyncio.gather(*list(self._actuation_tasks), return_exceptions=True)

    # --- Internals (called with the lock held) ---

    async def _load_round(self, round_id: str, initial_position: RevealPosition) -> SequencerSession:
        previous = self._session
        if previous is not None:
            logger.info("Leaving round '%s' for '%s'", previous.round_id, round_id)
            self._stop_blink()
            self._dispatch_lighting(LightingMode.OFF)

        session = SequencerSession(round_id=round_id)
        self._session = session
        logger.info("Loading round '%s'", round_id)

        try:
            round_ = await self._content_store.get_round(round_id)
            questions = await self._content_store.get_questions_for_round(round_id)
        except ContentStoreError as exc:
            logger.error("Could not load round '%s': %s", round_id, exc)
            session.status = SequencerStatus.FINISHED
            session.load_error = str(exc)
            self._dispatch_lighting(LightingMode.OFF)
            return session

        session.round = round_
        session.questions = [replace(q, answers=visible_answers(q)) for q in questions]
        if not session.questions:
            logger.info("Round '%s' has no questions", round_id)
            session.status = SequencerStatus.FINISHED
            self._dispatch_lighting(LightingMode.OFF)
            return session

        session.status = SequencerStatus.ACTIVE
        self._set_position(initial_position, PositionOrigin.EXTERNAL)
        return session

    def _set_position(self, position: RevealPosition, origin: PositionOrigin) -> None:
        session = self._session
        position = clamp_position(session.questions, position)
        previous = session.position if session.positioned else None
        session.mutation_count += 1

        if position == previous:
            logger.debug("Position %s unchanged; re-applying lighting", position.as_tuple())
            if session.step_kind is StepKind.BLINK and not self._blink.is_running():
                self._start_blink(session.layout.max_answers, with_sound=False)
            self._apply_lighting(session)
            return

        advanced = previous is not None and position.as_tuple() > previous.as_tuple()
        session.position = position
        session.positioned = True
        layout = session.layout
        kind = layout.kind_of(position.step_index)
        logger.debug(
            "Position %s -> %s (%s, %s)",
            previous.as_tuple() if previous else None,
            position.as_tuple(),
            kind.value if kind else "?",
            origin.value,
        )

        self._stop_blink()
        if advanced:
            self._play_step_cue(layout, position.step_index)
        if kind is StepKind.BLINK:
            self._start_blink(layout.max_answers, with_sound=advanced)

        self._apply_lighting(session)
        if origin is PositionOrigin.INTERNAL:
            self._write_navigation(session)

    def _finish(self, session: SequencerSession) -> None:
        logger.info("Round '%s' finished", session.round_id)
        session.status = SequencerStatus.FINISHED
        session.lighting_mode = LightingMode.OFF
        self._stop_blink()
        self._dispatch_lighting(LightingMode.OFF)

    def _consume_echo(self, session: SequencerSession, event: NavigationEvent) -> bool:
        for index, write in enumerate(session.self_writes):
            if event.token != write.token or write.location != event.location:
                continue
            # Older writes were necessarily reported before this one.
            for _ in range(index + 1):
                session.self_writes.popleft()
            logger.debug("Ignoring echo of navigation write #%d", write.token)
            return True
        return False

    def _write_navigation(self, session: SequencerSession) -> None:
        self._write_token += 1
        write = self._navigation.write(session.location(), self._write_token)
        session.self_writes.append(write)

    def _play_step_cue(self, layout: StepLayout, step_index: int) -> None:
        number = layout.answer_number(step_index)
        if number is not None:
            self._cue_board.play(_REVEAL_CUES[number - 1])
        elif step_index == layout.correct_step:
            self._cue_board.play(AudioCue.CORRECT)

    def _start_blink(self, answer_count: int, with_sound: bool) -> None:
        self._blink.start(answer_count)
        if with_sound and self._blink.is_running():
            self._cue_board.play(AudioCue.BLINK_LOOP)

    def _stop_blink(self) -> None:
        if not self._blink.is_running():
            return
        self._blink.stop()
        self._cue_board.stop(AudioCue.BLINK_LOOP)

    def _apply_lighting(self, session: SequencerSession) -> None:
        question = session.current_question
        answers = question.answers if question else []
        mode = lighting_mode_for_step(
            session.position.step_index,
            len(answers),
            correct_answer_index(answers),
        )
        session.lighting_mode = mode
        self._dispatch_lighting(mode)

    def _dispatch_lighting(self, mode: LightingMode) -> None:
        self._actuation_generation += 1
        task = asyncio.get_running_loop().create_task(
            self._actuate(mode, self._actuation_generation)
        )
        self._actuation_tasks.add(task)
        task.add_done_callback(self._actuation_tasks.discard)

    async def _actuate(self, mode: LightingMode, generation: int) -> None:
        try:
            accepted = await self._actuator.set_mode(mode)
        except Exception:
            logger.exception("Lighting mode %s failed", mode.value)
            return
        if generation != self._actuation_generation:
            logger.debug("Lighting result for %s superseded", mode.value)
        elif not accepted:
            logger.warning("Lighting controller did not accept mode %s", mode.value)
