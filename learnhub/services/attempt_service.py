"""
Attempt Service
Student side of the assessment lifecycle: start an attempt, answer
questions (auto-grading objective ones inline) and submit
"""
import logging
import os

from learnhub.errors import (
    AssessmentUnavailableError, AttemptClosedError, AttemptLimitExceeded,
    NotFoundError, ValidationError
)
from learnhub.models import Assessment, Attempt, Question, QuestionResponse
from learnhub.models.attempt import IN_PROGRESS, SUBMITTED
from learnhub.services.analytics_service import AnalyticsService
from learnhub.services.gradebook_service import GradebookService
from learnhub.services.scoring_service import ScoringService
from learnhub.services.user_service import UserService
from learnhub.utils import atomic, now_utc

logger = logging.getLogger(__name__)


class AttemptService:
    """Attempt lifecycle"""

    @staticmethod
    def get_attempt(session, attempt_id):
        attempt = session.get(Attempt, attempt_id)
        if not attempt:
            raise NotFoundError('Attempt', attempt_id)
        return attempt

    @staticmethod
    def list_attempts(session, assessment_id=None, user_id=None):
        query = session.query(Attempt)
        if assessment_id is not None:
            query = query.filter_by(assessment_id=assessment_id)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        return query.order_by(Attempt.started_at, Attempt.id).all()

    @staticmethod
    def count_attempts(session, assessment_id, user_id):
        return session.query(Attempt).filter_by(
            assessment_id=assessment_id,
            user_id=user_id
        ).count()

    @staticmethod
    @atomic
    def start_attempt(session, assessment_id, user_id):
        """
        Open a new attempt for a student

        The assessment row is locked while prior attempts are counted, and
        the (assessment, user, attempt_number) constraint rejects a racing
        duplicate at commit.

        Returns:
            Attempt: the new in-progress attempt
        """
        assessment = session.query(Assessment).filter_by(
            id=assessment_id
        ).with_for_update(of=Assessment).first()
        if not assessment:
            raise NotFoundError('Assessment', assessment_id)
        UserService.get_user(session, user_id)

        if not assessment.is_open():
            raise AssessmentUnavailableError('Assessment is not open for attempts')

        prior = AttemptService.count_attempts(session, assessment_id, user_id)
        if assessment.max_attempts is not None and prior >= assessment.max_attempts:
            logger.warning(
                "User %s hit max attempts (%s) on assessment %s",
                user_id, assessment.max_attempts, assessment_id
            )
            raise AttemptLimitExceeded(f'Maximum attempts reached ({assessment.max_attempts})')

        attempt = Attempt(
            assessment_id=assessment_id,
            user_id=user_id,
            attempt_number=prior + 1,
            started_at=now_utc(),
            status=IN_PROGRESS,
        )
        session.add(attempt)
        session.flush()

        AnalyticsService.record_content_view(
            session, 'assessment', assessment.id, assessment.course_id, is_unique=prior == 0
        )
        logger.info(
            "Started attempt %s (#%s) on assessment %s for user %s",
            attempt.id, attempt.attempt_number, assessment_id, user_id
        )
        return attempt

    @staticmethod
    def _check_file(question, file_ref):
        allowed = question.get_allowed_file_types()
        if not (file_ref and allowed):
            return
        extension = os.path.splitext(file_ref)[1].lower()
        if extension not in [t.lower() for t in allowed]:
            raise ValidationError(f"File type '{extension or file_ref}' is not allowed for this question")

    @staticmethod
    @atomic
    def submit_response(session, attempt_id, question_id, selected_option_id=None,
                        text_response=None, file_ref=None):
        """
        Store the answer to one question, replacing any earlier answer to
        the same question in this attempt. Choice questions with a
        selected option are graded immediately.

        Returns:
            QuestionResponse: the stored response
        """
        attempt = AttemptService.get_attempt(session, attempt_id)
        if attempt.status != IN_PROGRESS:
            raise AttemptClosedError(f'Attempt {attempt_id} is {attempt.status}, answers are closed')

        question = session.get(Question, question_id)
        if not question:
            raise NotFoundError('Question', question_id)
        if question.assessment_id != attempt.assessment_id:
            raise ValidationError(f'Question {question_id} does not belong to this assessment')
        if selected_option_id is None and text_response is None and file_ref is None:
            raise ValidationError('Answer must include an option, text or file')
        AttemptService._check_file(question, file_ref)
        # Option ids are stored as strings
        if selected_option_id is not None:
            selected_option_id = str(selected_option_id)

        outcome = ScoringService.grade_answer(question, selected_option_id)

        response = session.query(QuestionResponse).filter_by(
            attempt_id=attempt_id,
            question_id=question_id
        ).first()
        if not response:
            response = QuestionResponse(attempt_id=attempt_id, question_id=question_id)
            session.add(response)

        response.selected_option_id = selected_option_id
        response.text_response = text_response
        response.file_ref = file_ref
        response.is_auto_graded = outcome.is_auto_graded
        response.is_correct = outcome.is_correct
        response.points_awarded = outcome.points_awarded
        response.feedback = None
        response.graded_by = None
        response.graded_at = None
        response.answered_at = now_utc()
        session.flush()
        return response

    @staticmethod
    @atomic
    def submit_attempt(session, attempt_id):
        """
        Hand in an attempt. If every response was auto-graded the attempt
        is graded on the spot; otherwise it waits for a tutor.

        Returns:
            Attempt: the attempt in its new status
        """
        attempt = AttemptService.get_attempt(session, attempt_id)
        assessment = session.get(Assessment, attempt.assessment_id)
        if not assessment:
            raise NotFoundError('Assessment', attempt.assessment_id)
        if attempt.status != IN_PROGRESS:
            raise AttemptClosedError(f'Attempt {attempt_id} was already submitted')

        responses = session.query(QuestionResponse).filter_by(attempt_id=attempt_id).all()
        attempt.submitted_at = now_utc()

        if any(not r.is_auto_graded for r in responses):
            attempt.status = SUBMITTED
            logger.info("Attempt %s submitted for manual grading", attempt_id)
            return attempt

        score = ScoringService.sum_points(responses)
        GradebookService.record_final_grade(session, attempt, assessment, score)
        return attempt
