"""
User Service
Directory of students, tutors and admins
"""
import logging

from learnhub.errors import DuplicateError, NotFoundError, ValidationError
from learnhub.models import User
from learnhub.models.user import ROLES
from learnhub.services.analytics_service import new_student_stats
from learnhub.utils import apply_updates, atomic, now_utc

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('first_name', 'last_name', 'profile_image', 'department', 'title')
PROFILE_CLEARABLE = ('profile_image', 'department', 'title')


class UserService:
    """User management"""

    @staticmethod
    def get_user(session, user_id):
        user = session.get(User, user_id)
        if not user:
            raise NotFoundError('User', user_id)
        return user

    @staticmethod
    def get_user_by_email(session, email):
        return session.query(User).filter_by(email=email.strip().lower()).first()

    @staticmethod
    def list_users(session, role=None):
        query = session.query(User)
        if role:
            query = query.filter_by(role=role)
        return query.order_by(User.last_name, User.first_name).all()

    @staticmethod
    @atomic
    def create_user(session, email, first_name, last_name, role, profile_image=None,
                    student_id=None, department=None, title=None):
        """Create a user; students get their stats row in the same transaction"""
        if role not in ROLES:
            raise ValidationError(f"Invalid role '{role}'")
        if not email or '@' not in email:
            raise ValidationError('A valid email is required')
        if not first_name or not last_name:
            raise ValidationError('First and last name are required')

        email = email.strip().lower()
        if UserService.get_user_by_email(session, email):
            raise DuplicateError('User with this email already exists')

        now = now_utc()
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            profile_image=profile_image,
            student_id=student_id,
            department=department,
            title=title,
            is_active=True,
            enrollment_date=now if role == 'student' else None,
            created_at=now,
            updated_at=now,
        )
        session.add(user)
        session.flush()

        if role == 'student':
            session.add(new_student_stats(user.id, now))

        logger.info("Created %s %s (id=%s)", role, email, user.id)
        return user

    @staticmethod
    @atomic
    def update_profile(session, user_id, **fields):
        user = UserService.get_user(session, user_id)
        apply_updates(user, fields, PROFILE_FIELDS, clearable=PROFILE_CLEARABLE)
        if not (user.first_name and user.last_name):
            raise ValidationError('First and last name are required')
        user.updated_at = now_utc()
        return user

    @staticmethod
    @atomic
    def record_login(session, user_id):
        user = UserService.get_user(session, user_id)
        user.last_login = now_utc()
        return user

    @staticmethod
    @atomic
    def deactivate_user(session, user_id):
        user = UserService.get_user(session, user_id)
        user.is_active = False
        user.updated_at = now_utc()
        logger.info("Deactivated user %s", user_id)
        return user
