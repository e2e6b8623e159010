"""
Grade Models
Immutable per-attempt grade snapshots and per-course aggregates
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc, isoformat

COURSE_GRADE_STATUSES = ('in_progress', 'completed', 'failed')


class Grade(db.Model):
    """Final grade snapshot of a graded attempt"""
    __tablename__ = 'grade'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=False, index=True)
    assessment_id = db.Column(db.Integer, db.ForeignKey('assessment.id'), nullable=False, index=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey('attempt.id'), nullable=False, unique=True)

    score = db.Column(db.Float, nullable=False)
    max_score = db.Column(db.Float, nullable=False)
    percentage = db.Column(db.Float, nullable=False)
    letter_grade = db.Column(db.String(2))

    is_final = db.Column(db.Boolean, nullable=False, default=True)

    recorded_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    recorded_by = db.Column(db.Integer, db.ForeignKey('user.id'))  # NULL when auto-graded

    assessment = db.relationship('Assessment', lazy='joined')
    course = db.relationship('Course', lazy='joined')
    student = db.relationship('User', foreign_keys=[user_id], lazy='joined')

    __table_args__ = (
        db.Index('ix_grade_user_course', 'user_id', 'course_id'),
    )

    def __repr__(self):
        return f'<Grade U{self.user_id} A{self.assessment_id}: {self.score}/{self.max_score}>'

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'courseId': self.course_id,
            'assessmentId': self.assessment_id,
            'attemptId': self.attempt_id,
            'score': self.score,
            'maxScore': self.max_score,
            'percentage': self.percentage,
            'letterGrade': self.letter_grade,
            'isFinal': self.is_final,
            'recordedAt': isoformat(self.recorded_at),
            'recordedBy': self.recorded_by,
        }


class CourseGrade(db.Model):
    """Aggregated grade of one student in one course"""
    __tablename__ = 'course_grade'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=False, index=True)

    total_points = db.Column(db.Float, nullable=False, default=0)
    earned_points = db.Column(db.Float, nullable=False, default=0)
    percentage = db.Column(db.Float, nullable=False, default=0)
    letter_grade = db.Column(db.String(2))

    status = db.Column(db.String(20), nullable=False, default='in_progress')
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    version = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'course_id', name='unique_course_grade'),
    )
    __mapper_args__ = {'version_id_col': version}

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'courseId': self.course_id,
            'totalPoints': self.total_points,
            'earnedPoints': self.earned_points,
            'percentage': self.percentage,
            'letterGrade': self.letter_grade,
            'status': self.status,
            'updatedAt': isoformat(self.updated_at),
        }
