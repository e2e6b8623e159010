"""
Assessment Service
Assessment definitions, their ordered questions and visibility
"""
import logging

from learnhub.errors import NotFoundError, ValidationError
from learnhub.models import Assessment, Attempt, Question, QuestionResponse
from learnhub.models.assessment import ASSESSMENT_TYPES
from learnhub.models.attempt import GRADED, SUBMITTED
from learnhub.models.question import CHOICE_TYPES, QUESTION_TYPES
from learnhub.services.analytics_service import AnalyticsService
from learnhub.services.course_service import CourseService
from learnhub.services.user_service import UserService
from learnhub.utils import apply_updates, as_utc, atomic, now_utc

logger = logging.getLogger(__name__)

ASSESSMENT_FIELDS = (
    'title', 'description', 'total_points', 'passing_score', 'time_limit',
    'max_attempts', 'shuffle_questions', 'show_correct_answers',
    'available_from', 'available_until'
)
ASSESSMENT_CLEARABLE = (
    'description', 'passing_score', 'time_limit', 'max_attempts',
    'available_from', 'available_until'
)
QUESTION_FIELDS = (
    'question', 'explanation', 'points', 'order', 'options', 'rubric',
    'allowed_file_types', 'max_file_size'
)
QUESTION_CLEARABLE = ('explanation', 'rubric', 'allowed_file_types', 'max_file_size')


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_settings(assessment):
    """Check an assessment's settings, raising ValidationError on the first problem"""
    if assessment.type not in ASSESSMENT_TYPES:
        raise ValidationError(f"Invalid assessment type '{assessment.type}'")
    if not _is_number(assessment.total_points) or assessment.total_points <= 0:
        raise ValidationError('Total points must be greater than zero')
    if assessment.passing_score is not None:
        if not _is_number(assessment.passing_score) or not 0 <= assessment.passing_score <= 100:
            raise ValidationError('Passing score must be a percentage between 0 and 100')
    if assessment.max_attempts is not None:
        if not isinstance(assessment.max_attempts, int) or assessment.max_attempts < 1:
            raise ValidationError('Max attempts must be at least 1 (omit for unlimited)')
    if assessment.time_limit is not None:
        if not isinstance(assessment.time_limit, int) or assessment.time_limit < 1:
            raise ValidationError('Time limit must be a positive number of minutes')
    if assessment.available_from and assessment.available_until:
        if as_utc(assessment.available_until) <= as_utc(assessment.available_from):
            raise ValidationError('Assessment must close after it opens')


def normalize_options(question_type, options, correct_answer=None):
    """
    Validate choice options and return them as a list of
    {"id", "text", "isCorrect"} dicts
    """
    if question_type not in CHOICE_TYPES:
        if options:
            raise ValidationError(f'{question_type} questions do not take options')
        return []

    if not options and question_type == 'true_false':
        if correct_answer is None:
            raise ValidationError('True/false questions need options or a correct answer')
        return [
            {'id': 'true', 'text': 'True', 'isCorrect': bool(correct_answer)},
            {'id': 'false', 'text': 'False', 'isCorrect': not bool(correct_answer)},
        ]

    if not options or len(options) < 2:
        raise ValidationError('Choice questions need at least two options')

    normalized = []
    seen = set()
    for option in options:
        if not isinstance(option, dict) or not option.get('id') or option.get('text') is None:
            raise ValidationError('Each option needs an id and a text')
        option_id = str(option['id'])
        if option_id in seen:
            raise ValidationError(f"Duplicate option id '{option_id}'")
        seen.add(option_id)
        normalized.append({
            'id': option_id,
            'text': str(option['text']),
            'isCorrect': bool(option.get('isCorrect')),
        })

    # Grading compares one selected option, so exactly one may be correct
    correct = sum(1 for o in normalized if o['isCorrect'])
    if correct != 1:
        raise ValidationError('Choice questions need exactly one correct option')
    return normalized


class AssessmentService:
    """Assessment definition management"""

    @staticmethod
    def get_assessment(session, assessment_id):
        assessment = session.get(Assessment, assessment_id)
        if not assessment:
            raise NotFoundError('Assessment', assessment_id)
        return assessment

    @staticmethod
    def get_assessment_with_questions(session, assessment_id):
        """Assessment and its questions in display order"""
        assessment = AssessmentService.get_assessment(session, assessment_id)
        return assessment, list(assessment.questions)

    @staticmethod
    def list_assessments(session, course_id, include_unpublished=False):
        query = session.query(Assessment).filter_by(course_id=course_id)
        if not include_unpublished:
            query = query.filter_by(is_published=True, is_visible_to_students=True)
        return query.order_by(Assessment.available_from, Assessment.id).all()

    @staticmethod
    def question_points_mismatch(assessment):
        """Sum of question points minus total points (0 when they add up)"""
        return assessment.question_points() - assessment.total_points

    @staticmethod
    @atomic
    def create_assessment(session, course_id, title, type, total_points, created_by,
                          description=None, passing_score=None, time_limit=None,
                          max_attempts=None, shuffle_questions=False,
                          show_correct_answers=False, available_from=None,
                          available_until=None):
        CourseService.get_course(session, course_id)
        UserService.get_user(session, created_by)
        if not title:
            raise ValidationError('Assessment title is required')

        now = now_utc()
        assessment = Assessment(
            course_id=course_id,
            title=title,
            description=description,
            type=type,
            total_points=total_points,
            passing_score=passing_score,
            time_limit=time_limit,
            max_attempts=max_attempts,
            shuffle_questions=bool(shuffle_questions),
            show_correct_answers=bool(show_correct_answers),
            is_published=False,
            is_visible_to_students=False,
            available_from=available_from,
            available_until=available_until,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        validate_settings(assessment)
        session.add(assessment)
        session.flush()
        logger.info("Created %s '%s' (id=%s) in course %s", type, title, assessment.id, course_id)
        return assessment

    @staticmethod
    @atomic
    def update_assessment(session, assessment_id, **fields):
        assessment = AssessmentService.get_assessment(session, assessment_id)
        apply_updates(assessment, fields, ASSESSMENT_FIELDS, clearable=ASSESSMENT_CLEARABLE)
        if not assessment.title:
            raise ValidationError('Assessment title is required')
        assessment.shuffle_questions = bool(assessment.shuffle_questions)
        assessment.show_correct_answers = bool(assessment.show_correct_answers)
        validate_settings(assessment)
        assessment.updated_at = now_utc()
        return assessment

    @staticmethod
    @atomic
    def set_assessment_visibility(session, assessment_id, is_published, is_visible_to_students):
        assessment = AssessmentService.get_assessment(session, assessment_id)
        assessment.is_published = bool(is_published)
        assessment.is_visible_to_students = bool(is_visible_to_students)
        assessment.updated_at = now_utc()

        if assessment.is_published:
            mismatch = AssessmentService.question_points_mismatch(assessment)
            if mismatch:
                logger.warning(
                    "Assessment %s published with question points %s != total points %s",
                    assessment.id, assessment.question_points(), assessment.total_points
                )
        return assessment

    @staticmethod
    @atomic
    def delete_assessment(session, assessment_id):
        assessment = AssessmentService.get_assessment(session, assessment_id)
        if session.query(Attempt.id).filter_by(assessment_id=assessment_id).first():
            raise ValidationError('Assessments with attempts cannot be deleted')
        AnalyticsService.drop_content(session, 'assessment', assessment_id)
        session.delete(assessment)
        logger.info("Deleted assessment %s", assessment_id)

    # ================= QUESTIONS =================

    @staticmethod
    def get_question(session, question_id):
        question = session.get(Question, question_id)
        if not question:
            raise NotFoundError('Question', question_id)
        return question

    @staticmethod
    @atomic
    def add_question(session, assessment_id, type, question, points, order=None,
                     explanation=None, options=None, correct_answer=None, rubric=None,
                     allowed_file_types=None, max_file_size=None):
        assessment = AssessmentService.get_assessment(session, assessment_id)
        if type not in QUESTION_TYPES:
            raise ValidationError(f"Invalid question type '{type}'")
        if not question:
            raise ValidationError('Question text is required')
        if not _is_number(points) or points < 0:
            raise ValidationError('Question points cannot be negative')

        if order is None:
            order = len(assessment.questions)

        now = now_utc()
        record = Question(
            assessment_id=assessment_id,
            type=type,
            question=question,
            explanation=explanation,
            points=points,
            order=order,
            rubric=rubric,
            max_file_size=max_file_size,
            created_at=now,
            updated_at=now,
        )
        record.set_options(normalize_options(type, options, correct_answer))
        record.set_allowed_file_types(allowed_file_types)
        assessment.questions.append(record)
        session.flush()
        return record

    @staticmethod
    @atomic
    def update_question(session, question_id, **fields):
        question = AssessmentService.get_question(session, question_id)
        for name, value in fields.items():
            if name not in QUESTION_FIELDS:
                raise ValidationError(f"Field '{name}' cannot be updated")
            if value is None and name not in QUESTION_CLEARABLE:
                raise ValidationError(f"Field '{name}' cannot be cleared")
            if name == 'options':
                question.set_options(normalize_options(question.type, value))
            elif name == 'allowed_file_types':
                question.set_allowed_file_types(value)
            elif name == 'points' and (not _is_number(value) or value < 0):
                raise ValidationError('Question points cannot be negative')
            else:
                setattr(question, name, value)
        if not question.question:
            raise ValidationError('Question text is required')
        question.updated_at = now_utc()
        return question

    @staticmethod
    @atomic
    def delete_question(session, question_id):
        question = AssessmentService.get_question(session, question_id)
        if session.query(QuestionResponse.id).filter_by(question_id=question_id).first():
            raise ValidationError('Questions that have been answered cannot be deleted')
        session.delete(question)

    @staticmethod
    @atomic
    def reorder_questions(session, assessment_id, question_ids):
        """Set display order from a full list of the assessment's question ids"""
        assessment = AssessmentService.get_assessment(session, assessment_id)
        by_id = {q.id: q for q in assessment.questions}
        if sorted(question_ids) != sorted(by_id):
            raise ValidationError('Reorder must list every question of the assessment exactly once')
        for index, question_id in enumerate(question_ids):
            by_id[question_id].order = index
        return [by_id[qid] for qid in question_ids]

    # ================= STATS =================

    @staticmethod
    def get_assessment_stats(session, assessment_id):
        """Attempt counts and score distribution for tutors"""
        assessment = AssessmentService.get_assessment(session, assessment_id)
        attempts = session.query(Attempt).filter_by(assessment_id=assessment_id).all()

        graded = [a for a in attempts if a.status == GRADED]
        scores = [a.percentage or 0 for a in graded]

        return {
            'totalAttempts': len(attempts),
            'completedAttempts': len(graded),
            'pendingGrading': sum(1 for a in attempts if a.status == SUBMITTED),
            'averageScore': sum(scores) / len(scores) if scores else 0,
            'highestScore': max(scores) if scores else 0,
            'lowestScore': min(scores) if scores else 0,
            'passRate': (sum(1 for a in graded if a.is_passed) / len(graded) * 100) if graded else 0,
            'passingScore': assessment.passing_score,
        }
