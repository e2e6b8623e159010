"""
Scoring Service
Per-question grading capabilities and score arithmetic
"""
from collections import namedtuple

from learnhub.errors import ValidationError

GradingOutcome = namedtuple('GradingOutcome', ['is_auto_graded', 'is_correct', 'points_awarded'])

# Awaiting a tutor
UNGRADED = GradingOutcome(False, None, None)

LETTER_GRADES = ((90, 'A'), (80, 'B'), (70, 'C'), (60, 'D'))


class AutoGradable:
    """Scored immediately by comparing the selected option to its flag"""
    auto_graded = True

    def grade(self, question, selected_option_id=None):
        options = question.get_options()
        if not selected_option_id or not options:
            return UNGRADED

        option = question.find_option(selected_option_id)
        is_correct = bool(option and option.get('isCorrect'))
        points = question.points if is_correct else 0
        return GradingOutcome(True, is_correct, points)


class ManuallyGraded:
    """Left for a tutor to award points"""
    auto_graded = False

    def grade(self, question, selected_option_id=None):
        return UNGRADED


_auto = AutoGradable()
_manual = ManuallyGraded()

GRADERS = {
    'multiple_choice': _auto,
    'true_false': _auto,
    'short_answer': _manual,
    'written': _manual,
    'file_upload': _manual,
}


class ScoringService:
    """Service for scoring answers and attempts"""

    @staticmethod
    def grader_for(question_type):
        try:
            return GRADERS[question_type]
        except KeyError:
            raise ValidationError(f"Unknown question type '{question_type}'")

    @staticmethod
    def grade_answer(question, selected_option_id=None):
        """
        Grade a single answer

        Returns:
            GradingOutcome: auto-graded flag, correctness and points
        """
        grader = ScoringService.grader_for(question.type)
        return grader.grade(question, selected_option_id)

    @staticmethod
    def calculate_percentage(score, total_points):
        """Score as a percentage of the assessment total (0 if total is not positive)"""
        if not total_points or total_points <= 0:
            return 0.0
        return score / total_points * 100

    @staticmethod
    def is_passed(percentage, passing_score):
        if passing_score is None:
            return True
        return percentage >= passing_score

    @staticmethod
    def letter_grade(percentage):
        for threshold, letter in LETTER_GRADES:
            if percentage >= threshold:
                return letter
        return 'F'

    @staticmethod
    def sum_points(responses):
        return sum(r.points_awarded or 0 for r in responses)

    @staticmethod
    def incremental_mean(old_mean, old_count, new_value):
        """newMean = (oldMean * oldCount + newValue) / (oldCount + 1)"""
        return ((old_mean or 0) * old_count + new_value) / (old_count + 1)
