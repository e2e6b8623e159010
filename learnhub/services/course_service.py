"""
Course Service
Course catalogue, enrollment and progress
"""
import logging

from learnhub.errors import DuplicateError, NotFoundError, ValidationError
from learnhub.models import Course, Enrollment
from learnhub.services.analytics_service import AnalyticsService
from learnhub.services.user_service import UserService
from learnhub.utils import apply_updates, as_utc, atomic, now_utc

logger = logging.getLogger(__name__)

COURSE_FIELDS = ('name', 'description', 'cover_image', 'start_date', 'end_date')
COURSE_CLEARABLE = ('cover_image', 'start_date', 'end_date')


class CourseService:
    """Course management"""

    @staticmethod
    def get_course(session, course_id):
        course = session.get(Course, course_id)
        if not course:
            raise NotFoundError('Course', course_id)
        return course

    @staticmethod
    def list_published_courses(session):
        return session.query(Course).filter_by(
            is_published=True,
            is_archived=False
        ).order_by(Course.code).all()

    @staticmethod
    def list_courses_by_tutor(session, tutor_id):
        return session.query(Course).filter_by(created_by=tutor_id).order_by(Course.code).all()

    @staticmethod
    def list_enrolled_courses(session, user_id):
        """Active enrollments with their course"""
        return session.query(Enrollment).filter_by(
            user_id=user_id,
            status='active'
        ).order_by(Enrollment.enrolled_at).all()

    @staticmethod
    @atomic
    def create_course(session, code, name, created_by, description='', cover_image=None,
                      start_date=None, end_date=None):
        if not code or not name:
            raise ValidationError('Course code and name are required')
        UserService.get_user(session, created_by)

        code = code.strip().upper()
        if session.query(Course).filter_by(code=code).first():
            raise DuplicateError('Course with this code already exists')
        if start_date and end_date and end_date <= start_date:
            raise ValidationError('Course end date must be after its start date')

        now = now_utc()
        course = Course(
            code=code,
            name=name,
            description=description or '',
            cover_image=cover_image,
            created_by=created_by,
            is_published=False,
            is_archived=False,
            start_date=start_date,
            end_date=end_date,
            created_at=now,
            updated_at=now,
        )
        session.add(course)
        session.flush()
        logger.info("Created course %s (id=%s)", code, course.id)
        return course

    @staticmethod
    @atomic
    def update_course(session, course_id, **fields):
        course = CourseService.get_course(session, course_id)
        apply_updates(course, fields, COURSE_FIELDS, clearable=COURSE_CLEARABLE)
        if not course.name:
            raise ValidationError('Course name is required')
        if course.start_date and course.end_date and as_utc(course.end_date) <= as_utc(course.start_date):
            raise ValidationError('Course end date must be after its start date')
        course.updated_at = now_utc()
        return course

    @staticmethod
    @atomic
    def set_course_published(session, course_id, is_published):
        course = CourseService.get_course(session, course_id)
        course.is_published = bool(is_published)
        course.updated_at = now_utc()
        return course

    @staticmethod
    @atomic
    def archive_course(session, course_id):
        course = CourseService.get_course(session, course_id)
        course.is_archived = True
        course.updated_at = now_utc()
        logger.info("Archived course %s", course.code)
        return course

    # ================= ENROLLMENT =================

    @staticmethod
    @atomic
    def enroll_student(session, user_id, course_id):
        user = UserService.get_user(session, user_id)
        if not user.is_student:
            raise ValidationError('Only students can enroll in courses')
        CourseService.get_course(session, course_id)

        existing = session.query(Enrollment).filter_by(
            user_id=user_id,
            course_id=course_id
        ).first()
        if existing:
            raise DuplicateError('Student is already enrolled in this course')

        enrollment = Enrollment(
            user_id=user_id,
            course_id=course_id,
            progress=0,
            status='active',
            enrolled_at=now_utc(),
        )
        session.add(enrollment)
        session.flush()

        AnalyticsService.on_enrolled(session, user_id)
        logger.info("Enrolled student %s in course %s", user_id, course_id)
        return enrollment

    @staticmethod
    @atomic
    def update_progress(session, user_id, course_id, progress):
        """Set progress (clamped to 0-100); reaching 100 completes the enrollment"""
        enrollment = session.query(Enrollment).filter_by(
            user_id=user_id,
            course_id=course_id
        ).first()
        if not enrollment:
            raise NotFoundError('Enrollment', f'{user_id}/{course_id}')

        try:
            progress = float(progress)
        except (TypeError, ValueError):
            raise ValidationError('Progress must be a number')
        enrollment.progress = min(100.0, max(0.0, progress))

        if enrollment.progress >= 100 and enrollment.status != 'completed':
            enrollment.status = 'completed'
            enrollment.completed_at = now_utc()
            AnalyticsService.on_course_completed(session, user_id)
            AnalyticsService.refresh_course_grade(session, user_id, course_id)
            logger.info("Student %s completed course %s", user_id, course_id)

        return enrollment
