"""Tests for reading show files."""

from pathlib import Path

import pytest

from quiz_show.core.show_importer import ShowImportError, load_show_from_file, parse_show_text

DEMO_SHOW = Path(__file__).resolve().parent.parent / "shows" / "demo_show.txt"


class TestParseShowText:
    """Tests for the show text format."""

    def test_parse_when_demo_show_then_rounds_and_questions_linked(self):
        show = load_show_from_file(DEMO_SHOW)
        assert show.source_path == DEMO_SHOW
        assert [(r.id, r.name, r.order) for r in show.rounds] == [
            ("general-knowledge", "General Knowledge", 1),
            ("music", "Music", 2),
        ]
        assert [q.id for q in show.questions] == [
            "general-knowledge-q1",
            "general-knowledge-q2",
            "music-q1",
        ]
        assert show.rounds[0].audio_path == "sounds/round_general.mp3"
        assert show.rounds[1].background_image_path is None

    def test_parse_when_question_complete_then_all_fields_read(self):
        show = parse_show_text(
            "ROUND: Science\n\n"
            "Q: Which gas do plants absorb?\n"
            "INTRO: Photosynthesis time.\n"
            "CATEGORY: Biology\n"
            "A: Oxygen\n"
            "B: Carbon dioxide\n"
            "C: Helium\n"
            "CORRECT: b\n"
            "EXPLANATION: Plants take in CO2.\n"
            "EXPLANATION_IMAGE: images/leaf.png\n"
        )
        question = show.questions[0]
        assert question.round_id == "science"
        assert question.introduction == "Photosynthesis time."
        assert question.category == "Biology"
        assert [a.text for a in question.answers] == ["Oxygen", "Carbon dioxide", "Helium"]
        assert [a.is_correct for a in question.answers] == [False, True, False]
        assert [a.order for a in question.answers] == [0, 1, 2]
        assert question.explanation == "Plants take in CO2."
        assert question.explanation_image == "images/leaf.png"

    def test_parse_when_question_spans_lines_then_text_joined(self):
        show = parse_show_text("Q: First line\nsecond line\nA: Yes\n")
        assert show.questions[0].text == "First line\nsecond line"

    def test_parse_when_question_before_any_round_then_unassigned(self):
        show = parse_show_text("Q: Loose question\nA: One\n\nROUND: Later\n")
        assert show.questions[0].round_id is None
        assert show.questions[0].id == "unassigned-q1"

    def test_parse_when_more_than_three_answers_then_all_kept(self):
        """Trimming to the presented answers happens when a round is opened."""
        show = parse_show_text("Q: Old style\nA: 1\nB: 2\nC: 3\nD: 4\nE: 5\nCORRECT: E\n")
        answers = show.questions[0].answers
        assert len(answers) == 5
        assert answers[4].is_correct

    def test_parse_when_round_names_collide_then_ids_suffixed(self):
        show = parse_show_text("ROUND: Finale\n---\nROUND: Finale\n---\nROUND: Finale!\n")
        assert [r.id for r in show.rounds] == ["finale", "finale-2", "finale-3"]

    def test_parse_when_order_missing_then_declaration_order(self):
        show = parse_show_text("ROUND: One\n\nROUND: Two\n")
        assert [r.order for r in show.rounds] == [0, 1]

    def test_parse_when_comment_lines_present_then_ignored(self):
        show = parse_show_text("# a comment\nQ: Real question\n# another\nA: Yes\n")
        assert show.questions[0].text == "Real question"

    @pytest.mark.parametrize(
        "text, message",
        [
            ("", "did not contain"),
            ("A: Orphan answer\n", "Question text missing"),
            ("Q: Text\nA: One\nCORRECT: C\n", "missing answer"),
            ("Q: Text\nA:\n", "cannot be empty"),
            ("just some words\n", "outside of a known section"),
            ("ROUND:\n", "cannot be empty"),
            ("ROUND: Bad\nORDER: first\n", "ORDER must be an integer"),
            ("Q: Text\nROUND: Inside\n", "Round marker"),
        ],
    )
    def test_parse_when_malformed_then_import_error(self, text, message):
        with pytest.raises(ShowImportError, match=message):
            parse_show_text(text)

    def test_load_when_file_written_then_parsed(self, tmp_path):
        show_file = tmp_path / "tiny.txt"
        show_file.write_text("ROUND: Tiny\n\nQ: Hi?\nA: Hello\n", encoding="utf-8")
        show = load_show_from_file(show_file)
        assert show.questions[0].id == "tiny-q1"
