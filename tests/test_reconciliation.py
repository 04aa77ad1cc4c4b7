"""Tests for keeping the sequencer and the browser location in step."""

import asyncio

from helpers import SequencerHarness
from quiz_show.core.models import (
    AudioCue,
    LightingMode,
    NavigationLocation,
    RevealPosition,
    SequencerStatus,
)


def _location(round_id="r1", question=0, step=0):
    return NavigationLocation(round_id=round_id, question_index=question, step_index=step)


class TestEchoSuppression:
    """Reports of the sequencer's own writes are not applied again."""

    def test_echo_when_page_reports_own_write_then_applied_once(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location())
            count_after_load = harness.sequencer.mutation_count
            await harness.sequencer.advance()
            count_after_advance = harness.sequencer.mutation_count
            await harness.echo_latest_write()
            result = (
                count_after_advance - count_after_load,
                harness.sequencer.mutation_count - count_after_advance,
                harness.sequencer.session.position,
                len(harness.sequencer.session.self_writes),
            )
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (1, 0, RevealPosition(0, 1), 0)

    def test_echo_when_only_last_of_rapid_writes_reported_then_all_cleared(self, three_question_round):
        """The page only pushes the newest write when clicks outpace its polling."""

        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location())
            for _ in range(3):
                await harness.sequencer.advance()
            count = harness.sequencer.mutation_count
            await harness.echo_latest_write()
            result = (
                harness.sequencer.mutation_count - count,
                harness.sequencer.session.position,
                len(harness.sequencer.session.self_writes),
            )
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (0, RevealPosition(0, 3), 0)

    def test_echo_when_each_rapid_write_reported_in_turn_then_none_applied(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location())
            writes = []
            for _ in range(3):
                await harness.sequencer.advance()
                writes.append(harness.navigation.latest_write())
            count = harness.sequencer.mutation_count
            for write in writes:
                await harness.navigation.report(write.location, write.token)
            result = (harness.sequencer.mutation_count - count, harness.sequencer.session.position)
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (0, RevealPosition(0, 3))

    def test_navigation_when_tokenless_report_hits_pending_write_then_applied(self, three_question_round):
        """An address-bar edit to a location still awaiting its echo is a real navigation."""

        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(step=1))
            await harness.sequencer.advance()
            await harness.sequencer.advance()
            count = harness.sequencer.mutation_count
            await harness.navigation.report(_location(step=2))
            result = (harness.sequencer.mutation_count - count, harness.sequencer.session.position)
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (1, RevealPosition(0, 2))

    def test_echo_when_token_differs_then_treated_as_navigation(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location())
            await harness.sequencer.advance()
            count = harness.sequencer.mutation_count
            write = harness.navigation.latest_write()
            await harness.navigation.report(write.location, write.token + 100)
            result = (harness.sequencer.mutation_count - count, len(harness.sequencer.session.self_writes))
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (1, 1)

    def test_echo_when_arriving_after_genuine_back_then_back_is_kept(self, three_question_round):
        """A late echo never undoes a navigation the user made in between."""

        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location())
            await harness.sequencer.advance()
            pending = harness.navigation.latest_write()
            await harness.navigation.report(_location(step=0))
            await harness.navigation.report(pending.location, pending.token)
            result = harness.sequencer.session.position
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == RevealPosition(0, 0)


class TestGenuineNavigation:
    """Back, forward, reload and hand-edited locations."""

    def test_back_when_blinking_then_blink_stops_and_lights_follow(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(step=4))
            await harness.sequencer.advance()
            await harness.echo_latest_write()
            await asyncio.sleep(0.03)
            write_before = harness.navigation.latest_write()
            cue_sequence = harness.cues.get_sequence()
            await harness.navigation.report(_location(step=4))
            await harness.settle()
            result = (
                harness.sequencer.session.position,
                harness.sequencer.blink_active,
                harness.actuator.modes[-1],
                harness.navigation.latest_write() == write_before,
                [(event.cue, event.action.value) for event in harness.cues.events_since(cue_sequence)],
            )
            await harness.sequencer.close()
            return result

        position, blinking, mode, no_write_back, cues = asyncio.run(scenario())
        assert position == RevealPosition(0, 4)
        assert not blinking
        assert mode is LightingMode.THREE
        assert no_write_back
        assert cues == [(AudioCue.BLINK_LOOP, "stop")]

    def test_reload_when_same_location_reported_then_state_reasserted_silently(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(step=3))
            await harness.settle()
            count = harness.sequencer.mutation_count
            sent = len(harness.actuator.modes)
            await harness.navigation.report(_location(step=3))
            await harness.settle()
            result = (
                harness.sequencer.mutation_count - count,
                harness.actuator.modes[sent:],
                harness.cues.played(),
            )
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (1, [LightingMode.TWO], [])

    def test_first_report_when_page_loaded_ahead_of_session_then_resumed_silently(self, three_question_round):
        """A deep link opened in the same round is a resume, not a step forward."""

        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(step=1))
            count = harness.sequencer.mutation_count
            await harness.navigation.report(_location(step=3), initial=True)
            result = (
                harness.sequencer.mutation_count - count,
                harness.sequencer.session.position,
                harness.cues.played(),
            )
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (1, RevealPosition(0, 3), [])

    def test_first_report_when_landing_on_blink_step_then_sweep_without_sound(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(step=4))
            await harness.navigation.report(_location(step=5), initial=True)
            result = (harness.sequencer.blink_active, harness.cues.played())
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (True, [])

    def test_first_report_when_writes_pending_then_they_are_forgotten(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location())
            await harness.sequencer.advance()
            await harness.sequencer.advance()
            await harness.navigation.report(_location(step=1), initial=True)
            result = (len(harness.sequencer.session.self_writes), harness.sequencer.session.position)
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (0, RevealPosition(0, 1))

    def test_hand_edited_location_when_out_of_range_then_clamped_without_write(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(question=5, step=99))
            result = (harness.sequencer.session.position, harness.navigation.latest_write())
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (RevealPosition(2, 5), None)

    def test_navigation_when_round_finished_then_round_reopens(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(question=2, step=5))
            await harness.sequencer.advance()
            finished = harness.sequencer.status
            await harness.navigation.report(_location(question=1, step=3))
            result = (finished, harness.sequencer.status, harness.sequencer.session.position)
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (
            SequencerStatus.FINISHED,
            SequencerStatus.ACTIVE,
            RevealPosition(1, 3),
        )

    def test_navigation_when_round_failed_to_load_then_not_retried(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(round_id="nope"))
            session = harness.sequencer.session
            await harness.navigation.report(_location(round_id="nope", step=2))
            result = (harness.sequencer.session is session, session.status, session.load_error is not None)
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (True, SequencerStatus.FINISHED, True)


class TestRoundChange:
    """Navigating to another round replaces the session."""

    def test_round_change_when_blinking_then_blink_stops_and_new_round_loads(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(step=5))
            await asyncio.sleep(0.03)
            await harness.settle()
            sent = len(harness.actuator.modes)
            await harness.navigation.report(_location(round_id="r2"))
            await harness.settle()
            session = harness.sequencer.session
            result = (
                session.round_id,
                session.status,
                session.position,
                harness.sequencer.blink_active,
                harness.actuator.modes[sent:],
            )
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (
            "r2",
            SequencerStatus.ACTIVE,
            RevealPosition(0, 0),
            False,
            [LightingMode.OFF, LightingMode.OFF],
        )

    def test_round_change_when_resuming_mid_question_then_silent(self, three_question_round):
        async def scenario():
            harness = SequencerHarness(three_question_round)
            await harness.navigation.report(_location(step=2))
            await harness.navigation.report(_location(round_id="r2", step=3))
            result = (harness.sequencer.session.position, harness.cues.played())
            await harness.sequencer.close()
            return result

        assert asyncio.run(scenario()) == (RevealPosition(0, 3), [])
