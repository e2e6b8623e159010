"""Tests for running aggregates: student stats, streaks, content analytics, course grades."""

from datetime import datetime, timedelta

import pytest
import pytz

from learnhub.errors import AggregateMissing
from learnhub.models import ContentAnalytics, CourseGrade, StudentStats
from learnhub.services import AnalyticsService, AttemptService, CourseService
from learnhub.services.analytics_service import new_student_stats


def _take(session, assessment, question, student_id, option):
    attempt = AttemptService.start_attempt(session, assessment.id, student_id)
    AttemptService.submit_response(session, attempt.id, question.id, selected_option_id=option)
    return AttemptService.submit_attempt(session, attempt.id)


def _stats(session, user_id):
    return session.query(StudentStats).filter_by(user_id=user_id).one()


class TestStudentStats:
    def test_students_get_a_stats_row(self, session, student, tutor):
        assert _stats(session, student.id).total_assessments_completed == 0
        assert session.query(StudentStats).filter_by(user_id=tutor.id).first() is None

    def test_running_average(self, session, make_assessment, add_choice, student):
        assessment = make_assessment(total_points=5)
        question = add_choice(assessment, points=5)

        _take(session, assessment, question, student.id, "b")
        _take(session, assessment, question, student.id, "a")
        _take(session, assessment, question, student.id, "b")

        stats = _stats(session, student.id)
        assert stats.total_assessments_completed == 3
        assert stats.average_score == pytest.approx(200 / 3)
        assert stats.highest_score == 100

    def test_missing_row_is_recreated(self, session, student, course):
        session.query(StudentStats).filter_by(user_id=student.id).delete()
        session.commit()

        CourseService.enroll_student(session, student.id, course.id)
        assert _stats(session, student.id).total_courses_enrolled == 1

    def test_non_students_are_skipped(self, session, tutor):
        with pytest.raises(AggregateMissing):
            AnalyticsService.get_or_create_stats(session, tutor.id)
        assert AnalyticsService.on_assessment_graded(session, tutor.id, 90) is None
        assert AnalyticsService.on_enrolled(session, 999) is None


class TestStreaks:
    def _stats_at(self, at):
        return new_student_stats(1, at)

    def test_consecutive_days_extend_streak(self):
        start = datetime(2024, 3, 1, 9, tzinfo=pytz.utc)
        stats = self._stats_at(start)
        AnalyticsService.touch_activity(stats, start)
        assert stats.current_streak == 1

        AnalyticsService.touch_activity(stats, start + timedelta(days=1))
        AnalyticsService.touch_activity(stats, start + timedelta(days=2))
        assert stats.current_streak == 3
        assert stats.longest_streak == 3

    def test_same_day_keeps_streak(self):
        start = datetime(2024, 3, 1, 9, tzinfo=pytz.utc)
        stats = self._stats_at(start)
        AnalyticsService.touch_activity(stats, start)
        AnalyticsService.touch_activity(stats, start + timedelta(days=1))
        AnalyticsService.touch_activity(stats, start + timedelta(days=1, hours=5))
        assert stats.current_streak == 2

    def test_gap_resets_streak_but_keeps_longest(self):
        start = datetime(2024, 3, 1, 9, tzinfo=pytz.utc)
        stats = self._stats_at(start)
        AnalyticsService.touch_activity(stats, start)
        AnalyticsService.touch_activity(stats, start + timedelta(days=1))
        AnalyticsService.touch_activity(stats, start + timedelta(days=5))
        assert stats.current_streak == 1
        assert stats.longest_streak == 2

    def test_day_boundary_follows_configured_timezone(self, app):
        morning = datetime(2024, 3, 1, 10, tzinfo=pytz.utc)
        evening = datetime(2024, 3, 1, 20, tzinfo=pytz.utc)

        utc_stats = self._stats_at(morning)
        AnalyticsService.touch_activity(utc_stats, morning)
        AnalyticsService.touch_activity(utc_stats, evening)
        assert utc_stats.current_streak == 1

        # 20:00 UTC is already the next day in India
        app.config["TIMEZONE"] = "Asia/Kolkata"
        local_stats = self._stats_at(morning)
        AnalyticsService.touch_activity(local_stats, morning)
        AnalyticsService.touch_activity(local_stats, evening)
        assert local_stats.current_streak == 2


class TestContentAnalytics:
    def test_completion_averages(self, session, make_assessment, add_choice, make_user):
        assessment = make_assessment(total_points=5, passing_score=50)
        question = add_choice(assessment, points=5)
        _take(session, assessment, question, make_user().id, "b")
        _take(session, assessment, question, make_user().id, "a")

        row = session.query(ContentAnalytics).filter_by(
            content_type="assessment", content_id=assessment.id
        ).one()
        assert row.total_completions == 2
        assert row.average_score == 50
        assert row.pass_rate == 50
        assert row.average_time_spent is not None
        assert row.unique_viewers == 2


class TestCourseGrade:
    def test_latest_grade_per_assessment_counts(self, session, course, make_assessment, add_choice, student):
        assessment = make_assessment(total_points=5)
        question = add_choice(assessment, points=5)
        _take(session, assessment, question, student.id, "a")
        _take(session, assessment, question, student.id, "b")

        course_grade = session.query(CourseGrade).filter_by(
            user_id=student.id, course_id=course.id
        ).one()
        assert course_grade.total_points == 5
        assert course_grade.earned_points == 5
        assert course_grade.percentage == 100
        assert course_grade.letter_grade == "A"
        assert course_grade.status == "in_progress"

    def test_points_weighted_across_assessments(self, session, course, make_assessment, add_choice, student):
        small = make_assessment(title="Small", total_points=5)
        big = make_assessment(title="Big", total_points=15)
        _take(session, small, add_choice(small, points=5), student.id, "b")
        _take(session, big, add_choice(big, points=15), student.id, "a")

        course_grade = session.query(CourseGrade).filter_by(
            user_id=student.id, course_id=course.id
        ).one()
        assert course_grade.earned_points == 5
        assert course_grade.total_points == 20
        assert course_grade.percentage == 25
        assert course_grade.letter_grade == "F"

    def test_completing_course_sets_final_status(self, session, course, make_assessment, add_choice, student):
        CourseService.enroll_student(session, student.id, course.id)
        assessment = make_assessment(total_points=5)
        _take(session, assessment, add_choice(assessment, points=5), student.id, "a")

        CourseService.update_progress(session, student.id, course.id, 100)
        course_grade = session.query(CourseGrade).filter_by(
            user_id=student.id, course_id=course.id
        ).one()
        assert course_grade.status == "failed"
        assert _stats(session, student.id).total_courses_completed == 1
