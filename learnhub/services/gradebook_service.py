"""
Gradebook Service
Records final grades and answers grade-book, leaderboard and
analytics queries
"""
import logging

from learnhub.errors import NotFoundError, ValidationError
from learnhub.models import ContentAnalytics, CourseGrade, Grade, StudentStats, User
from learnhub.models.attempt import GRADED
from learnhub.services.analytics_service import AnalyticsService
from learnhub.services.scoring_service import ScoringService
from learnhub.utils import now_utc

logger = logging.getLogger(__name__)


class GradebookService:
    """Grade recording and grade-book queries"""

    @staticmethod
    def record_final_grade(session, attempt, assessment, total_score, recorded_by=None, feedback=None):
        """
        Mark an attempt graded and write everything that depends on it:
        the Grade snapshot, the course aggregate, student stats and
        assessment analytics. Runs inside the caller's transaction.

        Returns:
            Grade: the new snapshot
        """
        now = now_utc()
        percentage = ScoringService.calculate_percentage(total_score, assessment.total_points)
        is_passed = ScoringService.is_passed(percentage, assessment.passing_score)

        if attempt.submitted_at is None:
            attempt.submitted_at = now
        attempt.status = GRADED
        attempt.total_score = total_score
        attempt.percentage = percentage
        attempt.is_passed = is_passed
        attempt.graded_at = now
        attempt.graded_by = recorded_by
        attempt.grading_claimed_by = None
        attempt.grading_claimed_at = None
        if feedback is not None:
            attempt.feedback = feedback

        grade = Grade(
            user_id=attempt.user_id,
            course_id=assessment.course_id,
            assessment_id=assessment.id,
            attempt_id=attempt.id,
            score=total_score,
            max_score=assessment.total_points,
            percentage=percentage,
            letter_grade=ScoringService.letter_grade(percentage),
            is_final=True,
            recorded_at=now,
            recorded_by=recorded_by,
        )
        session.add(grade)

        time_spent = attempt.time_spent_seconds()
        AnalyticsService.on_assessment_graded(session, attempt.user_id, percentage, time_spent)
        AnalyticsService.record_assessment_completion(session, assessment, percentage, is_passed, time_spent)
        session.flush()
        AnalyticsService.refresh_course_grade(session, attempt.user_id, assessment.course_id)

        logger.info(
            "Attempt %s graded: %s/%s (%.1f%%, %s)",
            attempt.id, total_score, assessment.total_points, percentage,
            'passed' if is_passed else 'failed'
        )
        return grade

    # ================= QUERIES =================

    @staticmethod
    def grades_for_student(session, user_id, course_id=None):
        query = session.query(Grade).filter_by(user_id=user_id)
        if course_id is not None:
            query = query.filter_by(course_id=course_id)
        return query.order_by(Grade.recorded_at.desc(), Grade.id.desc()).all()

    @staticmethod
    def grades_for_assessment(session, assessment_id):
        return session.query(Grade).filter_by(
            assessment_id=assessment_id
        ).order_by(Grade.recorded_at.desc(), Grade.id.desc()).all()

    @staticmethod
    def course_grade_summary(session, user_id, course_id):
        """
        Course aggregate row plus statistics over every grade in the course

        Returns:
            dict: courseGrade (or None) and stats
        """
        course_grade = session.query(CourseGrade).filter_by(
            user_id=user_id,
            course_id=course_id
        ).first()
        grades = GradebookService.grades_for_student(session, user_id, course_id)
        percentages = [g.percentage for g in grades]

        return {
            'courseGrade': course_grade.to_dict() if course_grade else None,
            'stats': {
                'totalGrades': len(grades),
                'totalPoints': sum(g.max_score for g in grades),
                'earnedPoints': sum(g.score for g in grades),
                'averagePercentage': sum(percentages) / len(percentages) if percentages else 0,
                'highestGrade': max(percentages) if percentages else 0,
                'lowestGrade': min(percentages) if percentages else 0,
            },
        }

    @staticmethod
    def get_student_stats(session, user_id):
        stats = session.query(StudentStats).filter_by(user_id=user_id).first()
        if not stats:
            raise NotFoundError('StudentStats', user_id)
        return stats

    @staticmethod
    def leaderboard(session, limit=None):
        """
        Students ranked by average score

        Returns:
            list: dicts with rank, user and stats
        """
        query = session.query(StudentStats, User).join(
            User, User.id == StudentStats.user_id
        ).order_by(
            StudentStats.average_score.desc(),
            StudentStats.total_assessments_completed.desc(),
            User.id
        )
        if limit is not None:
            if limit < 1:
                raise ValidationError('Limit must be at least 1')
            query = query.limit(limit)

        return [
            {
                'rank': i + 1,
                'user': user.to_dict(),
                'stats': stats.to_dict(),
            }
            for i, (stats, user) in enumerate(query.all())
        ]

    @staticmethod
    def course_analytics(session, course_id):
        """Content analytics of a course grouped by content type"""
        rows = session.query(ContentAnalytics).filter_by(course_id=course_id).all()
        notes = [r for r in rows if r.content_type == 'note']
        assessments = [r for r in rows if r.content_type == 'assessment']
        resources = [r for r in rows if r.content_type == 'resource']

        def mean(values):
            return sum(values) / len(values) if values else 0

        return {
            'notes': {
                'items': [r.to_dict() for r in notes],
                'totalViews': sum(r.total_views for r in notes),
                'uniqueViewers': sum(r.unique_viewers for r in notes),
            },
            'assessments': {
                'items': [r.to_dict() for r in assessments],
                'totalCompletions': sum(r.total_completions for r in assessments),
                'averageScore': mean([r.average_score or 0 for r in assessments]),
                'averagePassRate': mean([r.pass_rate or 0 for r in assessments]),
            },
            'resources': {
                'items': [r.to_dict() for r in resources],
                'totalViews': sum(r.total_views for r in resources),
            },
        }
