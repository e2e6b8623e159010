"""
Analytics Service
Keeps StudentStats, ContentAnalytics and CourseGrade rows in step with
user activity. Every method here runs inside the caller's unit of work
and never commits.
"""
from datetime import timedelta
import logging

from learnhub.errors import AggregateMissing
from learnhub.models import (
    ContentAnalytics, CourseGrade, Enrollment, Grade, StudentStats, User
)
from learnhub.services.scoring_service import ScoringService
from learnhub.utils import local_date, now_utc

logger = logging.getLogger(__name__)


def new_student_stats(user_id, at=None):
    """Zeroed stats row for a new student"""
    at = at or now_utc()
    return StudentStats(
        user_id=user_id,
        total_courses_enrolled=0,
        total_courses_completed=0,
        total_assessments_completed=0,
        total_notes_viewed=0,
        total_time_spent=0,
        average_score=0.0,
        highest_score=0.0,
        current_streak=0,
        longest_streak=0,
        last_activity_at=at,
        updated_at=at,
    )


class AnalyticsService:
    """Incremental aggregate maintenance"""

    # ================= STUDENT STATS =================

    @staticmethod
    def get_or_create_stats(session, user_id):
        """
        Load the stats row for a student, creating it if it was never made.
        Raises AggregateMissing for unknown users and non-students.
        """
        stats = session.query(StudentStats).filter_by(user_id=user_id).first()
        if stats:
            return stats

        user = session.get(User, user_id)
        if not user or not user.is_student:
            raise AggregateMissing('student_stats', user_id)

        stats = new_student_stats(user_id)
        session.add(stats)
        logger.info("Created missing stats row for student %s", user_id)
        return stats

    @staticmethod
    def _update_stats(session, user_id, update):
        try:
            stats = AnalyticsService.get_or_create_stats(session, user_id)
        except AggregateMissing as exc:
            logger.debug("Skipping stats update: %s", exc)
            return None
        update(stats)
        stats.updated_at = now_utc()
        return stats

    @staticmethod
    def touch_activity(stats, at=None):
        """Advance the daily streak and stamp last activity"""
        at = at or now_utc()
        today = local_date(at)
        last_day = local_date(stats.last_activity_at) if stats.last_activity_at else None

        if last_day == today:
            if not stats.current_streak:
                stats.current_streak = 1
        elif last_day == today - timedelta(days=1):
            stats.current_streak = (stats.current_streak or 0) + 1
        else:
            stats.current_streak = 1

        stats.longest_streak = max(stats.longest_streak or 0, stats.current_streak)
        stats.last_activity_at = at

    @staticmethod
    def on_enrolled(session, user_id):
        def update(stats):
            stats.total_courses_enrolled += 1
            AnalyticsService.touch_activity(stats)
        return AnalyticsService._update_stats(session, user_id, update)

    @staticmethod
    def on_course_completed(session, user_id):
        def update(stats):
            stats.total_courses_completed += 1
            AnalyticsService.touch_activity(stats)
        return AnalyticsService._update_stats(session, user_id, update)

    @staticmethod
    def on_note_viewed(session, user_id, duration=None, at=None):
        def update(stats):
            stats.total_notes_viewed += 1
            if duration:
                stats.total_time_spent += int(duration)
            AnalyticsService.touch_activity(stats, at)
        return AnalyticsService._update_stats(session, user_id, update)

    @staticmethod
    def on_assessment_graded(session, user_id, percentage, time_spent=None):
        """Fold a newly graded attempt into the running average"""
        def update(stats):
            completed = stats.total_assessments_completed
            stats.average_score = ScoringService.incremental_mean(
                stats.average_score, completed, percentage
            )
            stats.total_assessments_completed = completed + 1
            stats.highest_score = max(stats.highest_score or 0, percentage)
            if time_spent:
                stats.total_time_spent += int(time_spent)
            AnalyticsService.touch_activity(stats)
        return AnalyticsService._update_stats(session, user_id, update)

    # ================= CONTENT ANALYTICS =================

    @staticmethod
    def get_or_create_content(session, content_type, content_id, course_id):
        row = session.query(ContentAnalytics).filter_by(
            content_type=content_type,
            content_id=content_id
        ).first()
        if row:
            return row

        row = ContentAnalytics(
            content_type=content_type,
            content_id=content_id,
            course_id=course_id,
            total_views=0,
            unique_viewers=0,
            total_completions=0,
        )
        session.add(row)
        return row

    @staticmethod
    def record_content_view(session, content_type, content_id, course_id, is_unique):
        row = AnalyticsService.get_or_create_content(session, content_type, content_id, course_id)
        row.total_views += 1
        if is_unique:
            row.unique_viewers += 1
        row.updated_at = now_utc()
        return row

    @staticmethod
    def record_assessment_completion(session, assessment, percentage, is_passed, time_spent=None):
        row = AnalyticsService.get_or_create_content(
            session, 'assessment', assessment.id, assessment.course_id
        )
        completed = row.total_completions
        row.average_score = ScoringService.incremental_mean(row.average_score, completed, percentage)
        row.pass_rate = ScoringService.incremental_mean(
            row.pass_rate, completed, 100.0 if is_passed else 0.0
        )
        if time_spent is not None:
            row.average_time_spent = ScoringService.incremental_mean(
                row.average_time_spent, completed, time_spent
            )
        row.total_completions = completed + 1
        row.updated_at = now_utc()
        return row

    @staticmethod
    def drop_content(session, content_type, content_id):
        """Remove the analytics row of deleted content"""
        return session.query(ContentAnalytics).filter_by(
            content_type=content_type,
            content_id=content_id
        ).delete()

    # ================= COURSE GRADES =================

    @staticmethod
    def refresh_course_grade(session, user_id, course_id):
        """Recompute the course aggregate from the latest grade per assessment"""
        grades = session.query(Grade).filter_by(
            user_id=user_id,
            course_id=course_id,
            is_final=True
        ).order_by(Grade.recorded_at, Grade.id).all()

        latest = {}
        for grade in grades:
            latest[grade.assessment_id] = grade

        total_points = sum(g.max_score for g in latest.values())
        earned_points = sum(g.score for g in latest.values())
        percentage = ScoringService.calculate_percentage(earned_points, total_points)

        course_grade = session.query(CourseGrade).filter_by(
            user_id=user_id,
            course_id=course_id
        ).first()
        if not course_grade:
            course_grade = CourseGrade(user_id=user_id, course_id=course_id)
            session.add(course_grade)

        course_grade.total_points = total_points
        course_grade.earned_points = earned_points
        course_grade.percentage = percentage
        course_grade.letter_grade = ScoringService.letter_grade(percentage) if latest else None

        enrollment = session.query(Enrollment).filter_by(
            user_id=user_id,
            course_id=course_id
        ).first()
        if enrollment and enrollment.status == 'completed':
            course_grade.status = 'completed' if course_grade.letter_grade != 'F' else 'failed'
        else:
            course_grade.status = 'in_progress'
        course_grade.updated_at = now_utc()
        return course_grade
