"""Facade wiring content, lighting, sound cues and navigation to the sequencer."""

from __future__ import annotations

import logging
from pathlib import Path

from quiz_show.constants.show_constants import (
    BLINK_INTERVAL_MS,
    BLINK_LOOP_SOUND_PATH,
    CORRECT_SOUND_PATH,
    REVEAL_SOUND_PATHS,
)
from quiz_show.core.markdown_math_renderer import MarkdownMathRenderer, renderer
from quiz_show.core.models import AudioCue, LightingMode, Question, Round, StepKind
from quiz_show.core.reveal_sequencer import RevealSequencer, SequencerSession
from quiz_show.core.services.cue_board import CueBoard
from quiz_show.core.services.device_actuator import DeviceActuator, create_device_actuator
from quiz_show.core.services.navigation import NavigationSurface, decode_location
from quiz_show.core.services.round_repository import RoundRepository
from quiz_show.core.settings import ShowSettings
from quiz_show.core.show_importer import load_show_from_file
from quiz_show.core.step_layout import correct_answer_index

logger = logging.getLogger(__name__)

_CUE_SOURCES: dict[AudioCue, str] = {
    AudioCue.REVEAL_1: REVEAL_SOUND_PATHS[0],
    AudioCue.REVEAL_2: REVEAL_SOUND_PATHS[1],
    AudioCue.REVEAL_3: REVEAL_SOUND_PATHS[2],
    AudioCue.BLINK_LOOP: BLINK_LOOP_SOUND_PATH,
    AudioCue.CORRECT: CORRECT_SOUND_PATH,
}


def media_url(path: str | None) -> str | None:
    """Map a show-file media reference to a URL the page can load."""
    if not path:
        return None
    if path.startswith(("http://", "https://", "/")):
        return path
    return f"/media/{path}"


class ShowManager:
    """Entry point for the server: one presentation at a time."""

    def __init__(
        self,
        repository: RoundRepository,
        actuator: DeviceActuator,
        cue_board: CueBoard | None = None,
        navigation: NavigationSurface | None = None,
        blink_interval_ms: int = BLINK_INTERVAL_MS,
        markdown: MarkdownMathRenderer = renderer,
    ) -> None:
        self._repository = repository
        self._actuator = actuator
        self._cue_board = cue_board or CueBoard()
        self._navigation = navigation or NavigationSurface()
        self._blink_interval_ms = blink_interval_ms
        self._markdown = markdown
        self._sequencer: RevealSequencer | None = None

    @classmethod
    def from_settings(cls, settings: ShowSettings) -> ShowManager:
        """Build a manager from the show file and lighting settings.

        Raises ShowImportError for malformed show files and OSError when the
        file cannot be read.
        """
        show = load_show_from_file(Path(settings.show_file))
        repository = RoundRepository()
        repository.load(show.rounds, show.questions)
        logger.info(
            "Loaded %d round(s) and %d question(s) from %s",
            len(show.rounds),
            len(show.questions),
            settings.show_file,
        )
        if repository.unassigned_questions():
            logger.warning(
                "%d question(s) are not assigned to a round and will not be presented",
                len(repository.unassigned_questions()),
            )
        actuator = create_device_actuator(
            settings.lighting_base_url, settings.lighting_timeout_seconds
        )
        return cls(repository, actuator, blink_interval_ms=settings.blink_interval_ms)

    # --- Accessors ---

    @property
    def repository(self) -> RoundRepository:
        return self._repository

    @property
    def actuator(self) -> DeviceActuator:
        return self._actuator

    @property
    def navigation(self) -> NavigationSurface:
        return self._navigation

    @property
    def cue_board(self) -> CueBoard:
        return self._cue_board

    def get_sequencer(self) -> RevealSequencer:
        """Return the sequencer, creating it inside the running event loop."""
        if self._sequencer is None:
            self._sequencer = RevealSequencer(
                content_store=self._repository,
                actuator=self._actuator,
                cue_board=self._cue_board,
                navigation=self._navigation,
                blink_interval_ms=self._blink_interval_ms,
            )
        return self._sequencer

    def list_rounds(self) -> list[Round]:
        return self._repository.list_rounds()

    async def get_round(self, round_id: str) -> Round:
        return await self._repository.get_round(round_id)

    # --- Presentation control ---

    async def report_navigation(
        self,
        url: str,
        token: int | None = None,
        initial: bool = False,
    ) -> None:
        """Feed a browser location change into the sequencer.

        Raises LocationDecodeError (a ValueError) for non-presentation URLs.
        """
        location = decode_location(url)
        self.get_sequencer()
        await self._navigation.report(location, token, initial=initial)

    async def advance(self) -> None:
        await self.get_sequencer().advance()

    async def teardown(self) -> None:
        if self._sequencer is not None:
            await self._sequencer.teardown()

    async def set_lighting_mode(self, mode: LightingMode) -> bool:
        """Manual override from the operator; the next step change replaces it."""
        logger.info("Manual lighting override: %s", mode.value)
        return await self._actuator.set_mode(mode)

    async def shutdown(self) -> None:
        if self._sequencer is not None:
            await self._sequencer.close()
            self._sequencer = None
        await self._actuator.aclose()

    # --- Snapshot for the presentation page ---

    def snapshot(self, cue_since: int = 0) -> dict[str, object]:
        sequencer = self._sequencer
        session = sequencer.session if sequencer else None
        latest_write = self._navigation.latest_write()
        cues = [
            {
                "sequence": event.sequence,
                "cue": event.cue.value,
                "action": event.action.value,
                "src": _CUE_SOURCES[event.cue],
            }
            for event in self._cue_board.events_since(cue_since)
        ]
        payload: dict[str, object] = {
            "status": session.status.value if session else None,
            "round": self._round_payload(session.round) if session and session.round else None,
            "round_id": session.round_id if session else None,
            "load_error": session.load_error if session else None,
            "question_count": len(session.questions) if session else 0,
            "position": None,
            "step_kind": None,
            "question": None,
            "lighting_mode": session.lighting_mode.value if session else LightingMode.OFF.value,
            "lit_index": sequencer.lit_index if sequencer else None,
            "blink_active": sequencer.blink_active if sequencer else False,
            "navigation": (
                {"token": latest_write.token, "url": latest_write.url} if latest_write else None
            ),
            "cues": cues,
            "cue_sequence": self._cue_board.get_sequence(),
        }
        if session is not None and session.current_question is not None:
            payload["position"] = {
                "question_index": session.position.question_index,
                "step_index": session.position.step_index,
            }
            payload["step_kind"] = session.step_kind.value if session.step_kind else None
            payload["question"] = self._question_payload(session)
        return payload

    def _round_payload(self, round_: Round) -> dict[str, object]:
        return {
            "id": round_.id,
            "name": round_.name,
            "order": round_.order,
            "audio_url": media_url(round_.audio_path),
            "background_url": media_url(round_.background_image_path),
        }

    def _question_payload(self, session: SequencerSession) -> dict[str, object]:
        question: Question = session.current_question
        layout = session.layout
        step = session.position.step_index
        kind = session.step_kind
        highlight_shown = kind in (StepKind.CORRECT, StepKind.EXPLANATION)
        revealed = layout.revealed_answer_count(step)
        return {
            "id": question.id,
            "number": session.position.question_index + 1,
            "category": question.category,
            "introduction_html": self._markdown.render_fragment(question.introduction),
            "text_html": self._markdown.render_fragment(question.text) if step >= 1 else "",
            "answers": [
                {"id": answer.id, "html": self._markdown.render_inline(answer.text)}
                for answer in question.answers[:revealed]
            ],
            "max_answers": layout.max_answers,
            "highlight_index": correct_answer_index(question.answers) if highlight_shown else None,
            "explanation_html": (
                self._markdown.render_fragment(question.explanation)
                if kind is StepKind.EXPLANATION
                else ""
            ),
            "explanation_image_url": (
                media_url(question.explanation_image) if kind is StepKind.EXPLANATION else None
            ),
        }
