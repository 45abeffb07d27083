import pytest

from app.utils.grading import (
    AnswerSheet, InvalidSelection, QuestionKey, SheetClosed, StepState,
    compute_percentage, derive_locks, first_unlocked_index, grade_question, is_passed,
)


def _key(qid, options, correct, qtype="single"):
    return QuestionKey(question_id=qid, qtype=qtype, option_ids=frozenset(options), correct_ids=frozenset(correct))


def _step(has_lesson=True, completed=False, has_quiz=False, passed=False):
    return StepState(has_lesson=has_lesson, lesson_completed=completed, has_quiz=has_quiz, quiz_passed=passed)


class TestGradeQuestion:
    def test_exact_match_is_correct(self):
        assert grade_question([1, 2], [2, 1])

    def test_subset_gets_no_credit(self):
        assert not grade_question([1], [1, 2])

    def test_superset_gets_no_credit(self):
        assert not grade_question([1, 2, 3], [1, 2])

    def test_empty_selection_is_wrong(self):
        assert not grade_question([], [4])


class TestPercentage:
    def test_two_of_three(self):
        assert round(compute_percentage(2, 3), 2) == 66.67

    def test_no_questions_is_zero(self):
        assert compute_percentage(0, 0) == 0.0

    def test_pass_threshold_is_inclusive(self):
        assert is_passed(70.0, 70.0)
        assert not is_passed(69.99, 70.0)


class TestLocks:
    def test_first_step_always_open(self):
        assert derive_locks([_step()]) == [False]

    def test_incomplete_lesson_locks_next(self):
        assert derive_locks([_step(), _step()]) == [False, True]

    def test_completed_lesson_unlocks_next(self):
        assert derive_locks([_step(completed=True), _step()]) == [False, False]

    def test_failed_quiz_keeps_next_locked(self):
        states = [_step(completed=True, has_quiz=True, passed=False), _step()]
        assert derive_locks(states) == [False, True]

    def test_passed_quiz_and_lesson_unlock_next(self):
        states = [_step(completed=True, has_quiz=True, passed=True), _step()]
        assert derive_locks(states) == [False, False]

    def test_step_without_lesson_never_blocks(self):
        states = [_step(has_lesson=False), _step(), _step()]
        assert derive_locks(states) == [False, False, True]

    def test_completing_more_never_locks_a_step(self):
        before = derive_locks([_step(completed=True), _step(), _step()])
        after = derive_locks([_step(completed=True), _step(completed=True), _step()])
        assert all(a or not b for a, b in zip(before, after))
        assert after == [False, False, False]

    def test_first_unlocked_index(self):
        assert first_unlocked_index([False, True]) == 0
        assert first_unlocked_index([]) == 0


class TestAnswerSheet:
    def setup_method(self):
        self.keys = [
            _key(1, [10, 11, 12], [10]),
            _key(2, [20, 21, 22], [20, 22], qtype="multiple"),
        ]

    def test_single_choice_replaces_selection(self):
        sheet = AnswerSheet(self.keys, 70)
        sheet.select(1, 10)
        sheet.select(1, 11)
        assert sheet.selected(1) == [11]

    def test_multiple_choice_toggles(self):
        sheet = AnswerSheet(self.keys, 70)
        sheet.select(2, 20)
        sheet.select(2, 22)
        sheet.select(2, 20)
        assert sheet.selected(2) == [22]

    def test_unknown_option_rejected(self):
        sheet = AnswerSheet(self.keys, 70)
        with pytest.raises(InvalidSelection):
            sheet.select(1, 99)

    def test_unknown_question_rejected(self):
        sheet = AnswerSheet(self.keys, 70)
        with pytest.raises(InvalidSelection):
            sheet.replay({3: [10]})

    def test_replay_rejects_several_options_on_single_question(self):
        sheet = AnswerSheet(self.keys, 70)
        with pytest.raises(InvalidSelection):
            sheet.replay({1: [10, 11]})

    def test_replay_ignores_duplicate_ids(self):
        sheet = AnswerSheet(self.keys, 70)
        sheet.replay({1: [10, 10], 2: [20, 22, 20]})
        assert sheet.selected(1) == [10]
        assert sheet.selected(2) == [20, 22]

    def test_submit_grades_every_question(self):
        sheet = AnswerSheet(self.keys, 70)
        sheet.replay({1: [10]})
        result = sheet.submit()
        assert result.correct == 1
        assert result.total == 2
        assert result.percentage == 50.0
        assert not result.passed
        assert result.verdicts == {1: True, 2: False}

    def test_answers_frozen_after_submit(self):
        sheet = AnswerSheet(self.keys, 70)
        sheet.submit()
        with pytest.raises(SheetClosed):
            sheet.select(1, 10)
        with pytest.raises(SheetClosed):
            sheet.submit()

    def test_retry_only_after_failure(self):
        sheet = AnswerSheet(self.keys, 50)
        sheet.replay({1: [10]})
        assert sheet.submit().passed
        assert not sheet.can_retry
        with pytest.raises(SheetClosed):
            sheet.retry()

    def test_retry_starts_blank(self):
        sheet = AnswerSheet(self.keys, 70)
        sheet.replay({1: [11]})
        sheet.submit()
        assert sheet.can_retry
        fresh = sheet.retry()
        assert fresh.state == AnswerSheet.ANSWERING
        assert fresh.selected(1) == []
