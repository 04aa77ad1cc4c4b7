"""Content store holding the show's rounds and questions."""

from __future__ import annotations

from dataclasses import replace

from quiz_show.core.models import Answer, Question, Round


class ContentStoreError(Exception):
    """Raised when round content cannot be provided."""


class RoundNotFoundError(ContentStoreError):
    """Raised for an unknown round identifier."""


def _answer_order(answer: Answer) -> tuple[bool, int]:
    return (answer.order is None, answer.order or 0)


class RoundRepository:
    """In-memory store of rounds and their ordered questions.

    Reads are exposed as coroutines so the sequencer treats the store like any
    other asynchronous collaborator.
    """

    def __init__(self) -> None:
        self._rounds: dict[str, Round] = {}
        self._questions: list[Question] = []

    def load(self, rounds: list[Round], questions: list[Question]) -> None:
        """Replace the stored show with new rounds and questions."""
        round_ids = [round_.id for round_ in rounds]
        if len(set(round_ids)) != len(round_ids):
            raise ValueError("Round identifiers must be unique.")
        self._rounds = {round_.id: round_ for round_ in rounds}
        self._questions = list(questions)

    def clear(self) -> None:
        self._rounds = {}
        self._questions = []

    def has_rounds(self) -> bool:
        return bool(self._rounds)

    def list_rounds(self) -> list[Round]:
        return sorted(self._rounds.values(), key=lambda round_: (round_.order, round_.name))

    def unassigned_questions(self) -> list[Question]:
        return [question for question in self._questions if question.round_id is None]

    async def get_round(self, round_id: str) -> Round:
        round_ = self._rounds.get(round_id)
        if round_ is None:
            raise RoundNotFoundError(f"Round with ID '{round_id}' not found")
        return round_

    async def get_questions_for_round(self, round_id: str) -> list[Question]:
        if round_id not in self._rounds:
            raise RoundNotFoundError(f"Round with ID '{round_id}' not found")
        questions = [q for q in self._questions if q.round_id == round_id]
        questions.sort(key=lambda question: question.order)
        # Copies so callers can trim answers without touching the store.
        return [
            replace(question, answers=sorted(question.answers, key=_answer_order))
            for question in questions
        ]
