"""
User Model
Students, tutors and admins
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc, isoformat

ROLES = ('student', 'tutor', 'admin')


class User(db.Model):
    """User model"""
    __tablename__ = 'user'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    profile_image = db.Column(db.Text)
    role = db.Column(db.String(20), nullable=False, index=True)

    # Student-specific fields
    student_id = db.Column(db.String(50), index=True)
    enrollment_date = db.Column(db.DateTime(timezone=True))

    # Tutor-specific fields
    department = db.Column(db.String(100))
    title = db.Column(db.String(100))

    # Account status
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'

    @property
    def is_student(self):
        return self.role == 'student'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'profileImage': self.profile_image,
            'role': self.role,
            'studentId': self.student_id,
            'enrollmentDate': isoformat(self.enrollment_date),
            'department': self.department,
            'title': self.title,
            'isActive': self.is_active,
            'lastLogin': isoformat(self.last_login),
            'createdAt': isoformat(self.created_at),
        }
