"""
Course and Enrollment Models
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc, isoformat

ENROLLMENT_STATUSES = ('active', 'completed', 'dropped', 'pending')


class Course(db.Model):
    """Course model"""
    __tablename__ = 'course'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), nullable=False, unique=True, index=True)  # e.g. CS101
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    cover_image = db.Column(db.Text)

    is_published = db.Column(db.Boolean, nullable=False, default=False, index=True)
    is_archived = db.Column(db.Boolean, nullable=False, default=False)

    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)

    start_date = db.Column(db.DateTime(timezone=True))
    end_date = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    def __repr__(self):
        return f'<Course {self.code}>'

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'description': self.description,
            'coverImage': self.cover_image,
            'isPublished': self.is_published,
            'isArchived': self.is_archived,
            'createdBy': self.created_by,
            'startDate': isoformat(self.start_date),
            'endDate': isoformat(self.end_date),
            'createdAt': isoformat(self.created_at),
        }


class Enrollment(db.Model):
    """Student enrollment in a course"""
    __tablename__ = 'enrollment'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=False, index=True)

    progress = db.Column(db.Float, nullable=False, default=0)  # 0-100
    status = db.Column(db.String(20), nullable=False, default='active')

    enrolled_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    completed_at = db.Column(db.DateTime(timezone=True))

    course = db.relationship('Course', lazy='joined')

    __table_args__ = (
        db.UniqueConstraint('user_id', 'course_id', name='unique_enrollment_per_course'),
    )

    def __repr__(self):
        return f'<Enrollment user={self.user_id} course={self.course_id} {self.status}>'

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'courseId': self.course_id,
            'progress': self.progress,
            'status': self.status,
            'enrolledAt': isoformat(self.enrolled_at),
            'completedAt': isoformat(self.completed_at),
        }
