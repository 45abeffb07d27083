"""Grading and progression rules for step-gated courses.

Everything here works on plain ids and numbers so it can be exercised without
a database. Services translate ORM rows into ``QuestionKey`` and ``StepState``
values and turn the exceptions below into HTTP errors.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from app.core.constants import QuestionTypeEnum


class InvalidSelection(ValueError):
    """A selection that does not fit the question it targets."""


class SheetClosed(RuntimeError):
    """The answer sheet no longer accepts the requested transition."""


@dataclass(frozen=True)
class QuestionKey:
    question_id: int
    qtype: str
    option_ids: FrozenSet[int]
    correct_ids: FrozenSet[int]

    @classmethod
    def from_question(cls, question) -> "QuestionKey":
        qtype = question.qtype.value if hasattr(question.qtype, "value") else question.qtype
        return cls(
            question_id=question.id,
            qtype=qtype,
            option_ids=frozenset(o.id for o in question.options),
            correct_ids=frozenset(o.id for o in question.options if o.is_correct),
        )


@dataclass(frozen=True)
class GradeResult:
    correct: int
    total: int
    percentage: float
    passed: bool
    verdicts: Dict[int, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class StepState:
    has_lesson: bool
    lesson_completed: bool
    has_quiz: bool
    quiz_passed: bool


def grade_question(selected: Iterable[int], correct: Iterable[int]) -> bool:
    """Exact set equality, no partial credit."""
    return set(selected) == set(correct)


def compute_percentage(correct: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return correct / total * 100


def is_passed(percentage: float, passing_score: float) -> bool:
    return percentage >= passing_score


def derive_locks(states: Sequence[StepState]) -> List[bool]:
    """Step 0 is open; later steps open once the previous lesson (and its quiz, if any) is done.

    A previous step without a lesson never blocks its successor.
    """
    locks = []
    for index, _ in enumerate(states):
        if index == 0:
            locks.append(False)
            continue
        prev = states[index - 1]
        if not prev.has_lesson:
            locks.append(False)
            continue
        locked = not prev.lesson_completed
        if prev.has_quiz:
            locked = locked or not prev.quiz_passed
        locks.append(locked)
    return locks


def first_unlocked_index(locks: Sequence[bool]) -> int:
    for index, locked in enumerate(locks):
        if not locked:
            return index
    return 0


class AnswerSheet:
    """Client-side answering state for one quiz attempt.

    answering -> submitted, and from a failed submission back to a fresh
    answering sheet via ``retry``.
    """
    ANSWERING = "answering"
    SUBMITTED = "submitted"

    def __init__(self, keys: Sequence[QuestionKey], passing_score: float):
        self.keys: Dict[int, QuestionKey] = {k.question_id: k for k in keys}
        self.order = [k.question_id for k in keys]
        self.passing_score = passing_score
        self.state = self.ANSWERING
        self.result: Optional[GradeResult] = None
        self._selected: Dict[int, List[int]] = {}

    def _key(self, question_id: int) -> QuestionKey:
        key = self.keys.get(question_id)
        if key is None:
            raise InvalidSelection(f"Question {question_id} is not part of this quiz.")
        return key

    def select(self, question_id: int, option_id: int) -> None:
        if self.state != self.ANSWERING:
            raise SheetClosed("Answers cannot change after submission.")
        key = self._key(question_id)
        if option_id not in key.option_ids:
            raise InvalidSelection(f"Option {option_id} does not belong to question {question_id}.")
        current = self._selected.get(question_id, [])
        if key.qtype == QuestionTypeEnum.SINGLE.value:
            self._selected[question_id] = [option_id]
        elif option_id in current:
            self._selected[question_id] = [o for o in current if o != option_id]
        else:
            self._selected[question_id] = current + [option_id]

    def replay(self, answers: Mapping[int, Sequence[int]]) -> None:
        """Load submitted answers through ``select``, rejecting ambiguous single-choice input."""
        for question_id, option_ids in answers.items():
            key = self._key(question_id)
            distinct = list(dict.fromkeys(option_ids))
            if key.qtype == QuestionTypeEnum.SINGLE.value and len(distinct) > 1:
                raise InvalidSelection(f"Question {question_id} accepts a single option.")
            for option_id in distinct:
                self.select(question_id, option_id)

    def selected(self, question_id: int) -> List[int]:
        return list(self._selected.get(question_id, []))

    def submit(self) -> GradeResult:
        if self.state != self.ANSWERING:
            raise SheetClosed("This sheet was already submitted.")
        verdicts = {
            qid: grade_question(self._selected.get(qid, []), self.keys[qid].correct_ids)
            for qid in self.order
        }
        correct = sum(1 for v in verdicts.values() if v)
        total = len(self.order)
        percentage = compute_percentage(correct, total)
        self.result = GradeResult(
            correct=correct,
            total=total,
            percentage=percentage,
            passed=is_passed(percentage, self.passing_score),
            verdicts=verdicts,
        )
        self.state = self.SUBMITTED
        return self.result

    @property
    def can_retry(self) -> bool:
        return self.state == self.SUBMITTED and self.result is not None and not self.result.passed

    def retry(self) -> "AnswerSheet":
        if not self.can_retry:
            raise SheetClosed("Retry is only available after a failed submission.")
        return AnswerSheet(list(self.keys[qid] for qid in self.order), self.passing_score)
