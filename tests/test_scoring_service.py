"""Tests for per-question grading and score arithmetic."""

import pytest

from learnhub.errors import ValidationError
from learnhub.models import Question
from learnhub.services.scoring_service import UNGRADED, GRADERS, ScoringService


def _choice_question(points=4):
    question = Question(type="multiple_choice", question="2 + 2?", points=points)
    question.set_options([
        {"id": "three", "text": "3", "isCorrect": False},
        {"id": "four", "text": "4", "isCorrect": True},
    ])
    return question


class TestGradeAnswer:
    def test_correct_option_gets_full_points(self):
        outcome = ScoringService.grade_answer(_choice_question(), "four")
        assert outcome.is_auto_graded is True
        assert outcome.is_correct is True
        assert outcome.points_awarded == 4

    def test_wrong_option_gets_zero(self):
        outcome = ScoringService.grade_answer(_choice_question(), "three")
        assert outcome == (True, False, 0)

    def test_unknown_option_is_wrong(self):
        outcome = ScoringService.grade_answer(_choice_question(), "five")
        assert outcome.is_correct is False
        assert outcome.points_awarded == 0

    def test_choice_without_selection_waits_for_tutor(self):
        assert ScoringService.grade_answer(_choice_question(), None) == UNGRADED

    def test_written_is_never_auto_graded(self):
        question = Question(type="written", question="Why?", points=10)
        assert ScoringService.grade_answer(question, "anything") == UNGRADED

    def test_every_question_type_has_a_grader(self):
        assert set(GRADERS) == {
            "multiple_choice", "true_false", "short_answer", "written", "file_upload"
        }
        assert GRADERS["true_false"].auto_graded
        assert not GRADERS["file_upload"].auto_graded

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ScoringService.grader_for("essay")


class TestArithmetic:
    @pytest.mark.parametrize("percentage,letter", [
        (100, "A"), (90, "A"), (89.99, "B"), (80, "B"),
        (70, "C"), (60, "D"), (59.9, "F"), (0, "F"),
    ])
    def test_letter_grade(self, percentage, letter):
        assert ScoringService.letter_grade(percentage) == letter

    def test_percentage(self):
        assert ScoringService.calculate_percentage(7.5, 10) == 75
        assert ScoringService.calculate_percentage(5, 0) == 0

    def test_pass_threshold(self):
        assert ScoringService.is_passed(60, 60) is True
        assert ScoringService.is_passed(59.5, 60) is False
        assert ScoringService.is_passed(0, None) is True

    def test_incremental_mean(self):
        assert ScoringService.incremental_mean(0, 0, 80) == 80
        assert ScoringService.incremental_mean(80, 1, 60) == 70
        assert ScoringService.incremental_mean(None, 0, 50) == 50
