"""
Analytics Models
Per-student counters and per-content aggregates
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc, isoformat

CONTENT_TYPES = ('note', 'assessment', 'resource')


class StudentStats(db.Model):
    """Running counters for one student"""
    __tablename__ = 'student_stats'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)

    total_courses_enrolled = db.Column(db.Integer, nullable=False, default=0)
    total_courses_completed = db.Column(db.Integer, nullable=False, default=0)
    total_assessments_completed = db.Column(db.Integer, nullable=False, default=0)
    total_notes_viewed = db.Column(db.Integer, nullable=False, default=0)
    total_time_spent = db.Column(db.Integer, nullable=False, default=0)  # seconds

    average_score = db.Column(db.Float, nullable=False, default=0)
    highest_score = db.Column(db.Float, nullable=False, default=0)

    current_streak = db.Column(db.Integer, nullable=False, default=0)  # days in a row
    longest_streak = db.Column(db.Integer, nullable=False, default=0)
    last_activity_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<StudentStats U{self.user_id}: avg={self.average_score:.1f}>'

    def to_dict(self):
        return {
            'userId': self.user_id,
            'totalCoursesEnrolled': self.total_courses_enrolled,
            'totalCoursesCompleted': self.total_courses_completed,
            'totalAssessmentsCompleted': self.total_assessments_completed,
            'totalNotesViewed': self.total_notes_viewed,
            'totalTimeSpent': self.total_time_spent,
            'averageScore': self.average_score,
            'highestScore': self.highest_score,
            'currentStreak': self.current_streak,
            'longestStreak': self.longest_streak,
            'lastActivityAt': isoformat(self.last_activity_at),
            'updatedAt': isoformat(self.updated_at),
        }


class ContentAnalytics(db.Model):
    """View/completion counters for one note, assessment or resource"""
    __tablename__ = 'content_analytics'

    id = db.Column(db.Integer, primary_key=True)
    content_type = db.Column(db.String(20), nullable=False, index=True)
    content_id = db.Column(db.Integer, nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=False, index=True)

    total_views = db.Column(db.Integer, nullable=False, default=0)
    unique_viewers = db.Column(db.Integer, nullable=False, default=0)
    total_completions = db.Column(db.Integer, nullable=False, default=0)

    # Assessments only
    average_score = db.Column(db.Float)
    pass_rate = db.Column(db.Float)
    average_time_spent = db.Column(db.Float)

    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)
    version = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('content_type', 'content_id', name='unique_content_analytics'),
    )
    __mapper_args__ = {'version_id_col': version}

    def to_dict(self):
        return {
            'contentType': self.content_type,
            'contentId': self.content_id,
            'courseId': self.course_id,
            'totalViews': self.total_views,
            'uniqueViewers': self.unique_viewers,
            'totalCompletions': self.total_completions,
            'averageScore': self.average_score,
            'passRate': self.pass_rate,
            'averageTimeSpent': self.average_time_spent,
            'updatedAt': isoformat(self.updated_at),
        }
