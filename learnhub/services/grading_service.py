"""
Grading Service
Tutor side of the assessment lifecycle: pending queue, claim lock,
per-response points and finalization
"""
import logging

from learnhub.errors import (
    AlreadyGradedError, AttemptClosedError, GradingClaimedError,
    InvalidGradeError, NotFoundError, ValidationError
)
from learnhub.models import Assessment, Attempt, QuestionResponse
from learnhub.models.attempt import GRADED, GRADING, IN_PROGRESS, SUBMITTED
from learnhub.services.attempt_service import AttemptService
from learnhub.services.gradebook_service import GradebookService
from learnhub.services.scoring_service import ScoringService
from learnhub.services.user_service import UserService
from learnhub.utils import atomic, now_utc

logger = logging.getLogger(__name__)

GRADER_ROLES = ('tutor', 'admin')


def _require_grader(session, grader_id):
    grader = UserService.get_user(session, grader_id)
    if grader.role not in GRADER_ROLES:
        raise ValidationError('Only tutors and admins can grade')
    return grader


def _require_gradable(attempt, grader_id):
    """Attempt must be handed in, not yet graded and not claimed by someone else"""
    if attempt.status == GRADED:
        raise AlreadyGradedError(f'Attempt {attempt.id} has already been graded')
    if attempt.status == IN_PROGRESS:
        raise AttemptClosedError(f'Attempt {attempt.id} has not been submitted yet')
    if attempt.status == GRADING and attempt.grading_claimed_by != grader_id:
        raise GradingClaimedError(
            f'Attempt {attempt.id} is being graded by user {attempt.grading_claimed_by}'
        )


class GradingService:
    """Manual grading workflow"""

    @staticmethod
    def list_pending_grading(session, limit=None):
        """
        Submitted attempts waiting for a tutor, oldest first, each joined
        with its assessment, student and course
        """
        query = session.query(Attempt).filter_by(status=SUBMITTED).order_by(
            Attempt.submitted_at, Attempt.id
        )
        if limit is not None:
            if limit < 1:
                raise ValidationError('Limit must be at least 1')
            query = query.limit(limit)

        pending = []
        for attempt in query.all():
            assessment = attempt.assessment
            item = attempt.to_dict()
            item['assessment'] = assessment.to_dict() if assessment else None
            item['user'] = attempt.user.to_dict() if attempt.user else None
            item['course'] = assessment.course.to_dict() if assessment and assessment.course else None
            pending.append(item)
        return pending

    @staticmethod
    def get_response(session, response_id):
        response = session.get(QuestionResponse, response_id)
        if not response:
            raise NotFoundError('Response', response_id)
        return response

    @staticmethod
    @atomic
    def claim_attempt(session, attempt_id, grader_id):
        """Lock a submitted attempt for one grader (no-op if they hold it already)"""
        attempt = AttemptService.get_attempt(session, attempt_id)
        _require_grader(session, grader_id)
        _require_gradable(attempt, grader_id)

        if attempt.status == GRADING:
            return attempt

        attempt.status = GRADING
        attempt.grading_claimed_by = grader_id
        attempt.grading_claimed_at = now_utc()
        logger.info("Attempt %s claimed for grading by %s", attempt_id, grader_id)
        return attempt

    @staticmethod
    @atomic
    def release_attempt(session, attempt_id, grader_id):
        """Give a claimed attempt back to the pending queue"""
        attempt = AttemptService.get_attempt(session, attempt_id)
        if attempt.status != GRADING:
            raise AttemptClosedError(f'Attempt {attempt_id} is not claimed')
        if attempt.grading_claimed_by != grader_id:
            raise GradingClaimedError(
                f'Attempt {attempt_id} is claimed by user {attempt.grading_claimed_by}'
            )

        attempt.status = SUBMITTED
        attempt.grading_claimed_by = None
        attempt.grading_claimed_at = None
        logger.info("Attempt %s released by %s", attempt_id, grader_id)
        return attempt

    @staticmethod
    @atomic
    def grade_response(session, response_id, points_awarded, grader_id, feedback=None):
        """Award points (0..question points) and feedback to one response"""
        response = GradingService.get_response(session, response_id)
        attempt = AttemptService.get_attempt(session, response.attempt_id)
        _require_grader(session, grader_id)
        _require_gradable(attempt, grader_id)

        max_points = response.question.points
        if isinstance(points_awarded, bool) or not isinstance(points_awarded, (int, float)):
            raise InvalidGradeError('Points awarded must be a number')
        if not 0 <= points_awarded <= max_points:
            raise InvalidGradeError(f'Points awarded must be between 0 and {max_points}')

        response.points_awarded = points_awarded
        response.feedback = feedback
        response.graded_by = grader_id
        response.graded_at = now_utc()
        return response

    @staticmethod
    @atomic
    def finalize_grading(session, attempt_id, grader_id, feedback=None):
        """
        Total every response of the attempt and record the final grade.
        Responses a tutor never scored count as 0.

        Returns:
            Attempt: the graded attempt
        """
        attempt = AttemptService.get_attempt(session, attempt_id)
        assessment = session.get(Assessment, attempt.assessment_id)
        if not assessment:
            raise NotFoundError('Assessment', attempt.assessment_id)
        _require_grader(session, grader_id)
        _require_gradable(attempt, grader_id)

        responses = session.query(QuestionResponse).filter_by(attempt_id=attempt_id).all()
        ungraded = [r.id for r in responses if r.points_awarded is None]
        if ungraded:
            logger.warning("Finalizing attempt %s with ungraded responses %s (counted as 0)", attempt_id, ungraded)

        total_score = ScoringService.sum_points(responses)
        GradebookService.record_final_grade(
            session, attempt, assessment, total_score,
            recorded_by=grader_id,
            feedback=feedback
        )
        return attempt
