"""Utilities for importing a quiz show from a human-friendly text file.

File format (blocks separated by blank lines or '---'):

    ROUND: Round name
    ORDER: 1                        (optional, defaults to declaration order)
    AUDIO: sounds/round1.mp3        (optional)
    BACKGROUND: images/round1.jpg   (optional)

    Q: Question text (supports markdown + LaTeX). Additional lines until the
       next marker are treated as part of the question.
    INTRO: Text shown before the question (optional)
    CATEGORY: Category label (optional)
    A: First answer
    B: Second answer
    C: Third answer
    CORRECT: B                      (optional)
    EXPLANATION: Text shown after the correct answer (optional)
    EXPLANATION_IMAGE: images/q1.png (optional)

Question blocks belong to the most recent ROUND block. Questions that appear
before any ROUND are kept as unassigned. Answer letters run from A to Z so
that older shows with more than three answers still import; the presenter
only ever shows the first three.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
import string

from quiz_show.core.models import Answer, Question, Round


class ShowImportError(Exception):
    """Raised when a show definition cannot be parsed."""


@dataclass(slots=True)
class ImportedShow:
    """Container for imported rounds and questions."""

    source_path: Path | None
    rounds: list[Round]
    questions: list[Question]


_ANSWER_LETTERS = string.ascii_uppercase
_ROUND_KEYS = ("ROUND", "ORDER", "AUDIO", "BACKGROUND")
_QUESTION_KEYS = ("Q", "INTRO", "CATEGORY", "CORRECT", "EXPLANATION", "EXPLANATION_IMAGE")
_MARKER = re.compile(r"^([A-Za-z_]+):(.*)$")


def load_show_from_file(file_path: Path) -> ImportedShow:
    text = file_path.read_text(encoding="utf-8")
    show = parse_show_text(text)
    show.source_path = file_path
    return show


def parse_show_text(text: str) -> ImportedShow:
    rounds: list[Round] = []
    questions: list[Question] = []
    used_round_ids: set[str] = set()
    current_round: Round | None = None
    question_orders: dict[str | None, int] = {}

    for block in _split_blocks(text):
        first_key = _marker_key(block.splitlines()[0])
        if first_key == "ROUND":
            current_round = _parse_round_block(block, len(rounds), used_round_ids)
            rounds.append(current_round)
            continue

        round_id = current_round.id if current_round else None
        order = question_orders.get(round_id, 0)
        question_orders[round_id] = order + 1
        questions.append(_parse_question_block(block, round_id, order))

    if not rounds and not questions:
        raise ShowImportError("Show file did not contain any rounds or questions.")
    return ImportedShow(source_path=None, rounds=rounds, questions=questions)


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped.startswith("#"):
            continue
        if stripped == "---" or not stripped:
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        current_block.append(raw_line)
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _marker_key(line: str) -> str | None:
    match = _MARKER.match(line.strip())
    if not match:
        return None
    key = match.group(1).upper()
    if key in _ROUND_KEYS or key in _QUESTION_KEYS:
        return key
    if len(key) == 1 and key in _ANSWER_LETTERS:
        return key
    return None


def _marker_value(line: str) -> str:
    return line.split(":", 1)[1].strip()


def _parse_round_block(block: str, position: int, used_ids: set[str]) -> Round:
    name = ""
    order = position
    audio_path: str | None = None
    background: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        key = _marker_key(line)
        if key == "ROUND":
            name = _marker_value(line)
        elif key == "ORDER":
            order = _parse_int(_marker_value(line), "ORDER")
        elif key == "AUDIO":
            audio_path = _marker_value(line) or None
        elif key == "BACKGROUND":
            background = _marker_value(line) or None
        else:
            raise ShowImportError(f"Unexpected line in round block: '{line}'.")

    if not name:
        raise ShowImportError("Round name cannot be empty (ROUND: ...).")

    return Round(
        id=_unique_slug(name, used_ids),
        name=name,
        order=order,
        audio_path=audio_path,
        background_image_path=background,
    )


def _parse_question_block(block: str, round_id: str | None, order: int) -> Question:
    question_lines: list[str] = []
    answers: dict[str, str] = {}
    fields: dict[str, str] = {}
    correct_letter: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        key = _marker_key(line)

        if key == "Q":
            question_lines = [_marker_value(line)]
            current_section = "Q"
        elif key == "CORRECT":
            correct_letter = _marker_value(line).upper()
            current_section = None
        elif key in ("INTRO", "CATEGORY", "EXPLANATION", "EXPLANATION_IMAGE"):
            fields[key] = _marker_value(line)
            current_section = key
        elif key is not None and len(key) == 1:
            answers[key] = _marker_value(line)
            current_section = key
        elif key in _ROUND_KEYS:
            raise ShowImportError(f"Round marker inside a question block: '{line}'.")
        elif current_section == "Q":
            question_lines.append(line)
        elif current_section in fields:
            fields[current_section] = fields[current_section] + f"\n{line}"
        elif current_section in answers:
            answers[current_section] = answers[current_section] + f"\n{line}"
        else:
            raise ShowImportError(
                f"Encountered text outside of a known section: '{line}'."
            )

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise ShowImportError("Question text missing (Q: ...)")

    letters = sorted(answers, key=_ANSWER_LETTERS.index)
    if any(not answers[letter].strip() for letter in letters):
        raise ShowImportError("Answer text cannot be empty.")
    if correct_letter is not None and correct_letter not in answers:
        raise ShowImportError(f"CORRECT refers to a missing answer: '{correct_letter}'.")

    question_id = f"{round_id or 'unassigned'}-q{order + 1}"
    return Question(
        id=question_id,
        text=question_text,
        order=order,
        answers=[
            Answer(
                id=f"{question_id}-{letter.lower()}",
                text=answers[letter].strip(),
                is_correct=(letter == correct_letter),
                order=_ANSWER_LETTERS.index(letter),
            )
            for letter in letters
        ],
        round_id=round_id,
        introduction=fields.get("INTRO", "").strip(),
        category=fields.get("CATEGORY", "").strip(),
        explanation=fields.get("EXPLANATION", "").strip() or None,
        explanation_image=fields.get("EXPLANATION_IMAGE", "").strip() or None,
    )


def _parse_int(raw_value: str, label: str) -> int:
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ShowImportError(f"{label} must be an integer.") from exc


def _unique_slug(name: str, used_ids: set[str]) -> str:
    base = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "round"
    slug = base
    suffix = 2
    while slug in used_ids:
        slug = f"{base}-{suffix}"
        suffix += 1
    used_ids.add(slug)
    return slug
