"""Tests for users, courses and enrollment."""

import pytest

from learnhub.errors import DuplicateError, NotFoundError, ValidationError
from learnhub.models import StudentStats
from learnhub.services import CourseService, UserService


class TestUsers:
    def test_email_is_normalised_and_unique(self, session, make_user):
        user = make_user("tutor", email="  Grace@Example.COM ")
        assert user.email == "grace@example.com"
        assert UserService.get_user_by_email(session, "GRACE@example.com").id == user.id
        with pytest.raises(DuplicateError):
            make_user("student", email="grace@example.com")

    @pytest.mark.parametrize("kwargs", [
        {"role": "guest"},
        {"email": "not-an-email"},
        {"first_name": ""},
    ])
    def test_invalid_users_rejected(self, make_user, kwargs):
        role = kwargs.pop("role", "student")
        with pytest.raises(ValidationError):
            make_user(role, **kwargs)

    def test_profile_update_is_restricted(self, session, student):
        updated = UserService.update_profile(session, student.id, department="Physics")
        assert updated.department == "Physics"
        with pytest.raises(ValidationError):
            UserService.update_profile(session, student.id, role="admin")

    def test_login_and_deactivate(self, session, student):
        assert UserService.record_login(session, student.id).last_login is not None
        assert UserService.deactivate_user(session, student.id).is_active is False

    def test_list_by_role(self, session, tutor, student):
        assert [u.id for u in UserService.list_users(session, role="tutor")] == [tutor.id]
        assert len(UserService.list_users(session)) == 2


class TestCourses:
    def test_code_is_upper_cased_and_unique(self, session, course, tutor):
        assert course.code == "CS101"
        with pytest.raises(DuplicateError):
            CourseService.create_course(session, "CS101", "Again", tutor.id)

    def test_creator_must_exist(self, session):
        with pytest.raises(NotFoundError):
            CourseService.create_course(session, "MA101", "Calculus", 999)

    def test_published_listing_skips_archived(self, session, course, tutor):
        other = CourseService.create_course(session, "MA101", "Calculus", tutor.id)
        CourseService.set_course_published(session, course.id, True)
        CourseService.set_course_published(session, other.id, True)
        CourseService.archive_course(session, other.id)

        assert [c.code for c in CourseService.list_published_courses(session)] == ["CS101"]
        assert len(CourseService.list_courses_by_tutor(session, tutor.id)) == 2


class TestEnrollment:
    def test_enroll_updates_stats(self, session, course, student):
        enrollment = CourseService.enroll_student(session, student.id, course.id)
        assert enrollment.status == "active"

        stats = session.query(StudentStats).filter_by(user_id=student.id).one()
        assert stats.total_courses_enrolled == 1
        assert stats.current_streak == 1
        assert [e.course_id for e in CourseService.list_enrolled_courses(session, student.id)] == [course.id]

    def test_only_students_enroll(self, session, course, tutor):
        with pytest.raises(ValidationError):
            CourseService.enroll_student(session, tutor.id, course.id)

    def test_enroll_once(self, session, course, student):
        CourseService.enroll_student(session, student.id, course.id)
        with pytest.raises(DuplicateError):
            CourseService.enroll_student(session, student.id, course.id)

    def test_progress_is_clamped_and_completes(self, session, course, student):
        CourseService.enroll_student(session, student.id, course.id)

        assert CourseService.update_progress(session, student.id, course.id, -10).progress == 0
        enrollment = CourseService.update_progress(session, student.id, course.id, 150)
        assert enrollment.progress == 100
        assert enrollment.status == "completed"
        assert enrollment.completed_at is not None
        assert CourseService.list_enrolled_courses(session, student.id) == []

        # Completing twice does not double count
        CourseService.update_progress(session, student.id, course.id, 100)
        stats = session.query(StudentStats).filter_by(user_id=student.id).one()
        assert stats.total_courses_completed == 1

    def test_progress_needs_enrollment(self, session, course, student):
        with pytest.raises(NotFoundError):
            CourseService.update_progress(session, student.id, course.id, 50)
