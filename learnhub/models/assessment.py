"""
Assessment Model
Quizzes, tests, assignments and exams with their settings
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc, as_utc, isoformat

ASSESSMENT_TYPES = ('quiz', 'test', 'assignment', 'exam')


class Assessment(db.Model):
    """Assessment model"""
    __tablename__ = 'assessment'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    type = db.Column(db.String(20), nullable=False, index=True)

    # Settings
    total_points = db.Column(db.Float, nullable=False)
    passing_score = db.Column(db.Float)  # percentage, NULL = everyone passes
    time_limit = db.Column(db.Integer)  # minutes, NULL = no limit
    max_attempts = db.Column(db.Integer)  # NULL = unlimited
    shuffle_questions = db.Column(db.Boolean, nullable=False, default=False)
    show_correct_answers = db.Column(db.Boolean, nullable=False, default=False)

    # Visibility
    is_published = db.Column(db.Boolean, nullable=False, default=False, index=True)
    is_visible_to_students = db.Column(db.Boolean, nullable=False, default=False)

    # Scheduling - NULL means open
    available_from = db.Column(db.DateTime(timezone=True))
    available_until = db.Column(db.DateTime(timezone=True))

    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    # Relationships
    course = db.relationship('Course', lazy=True)
    questions = db.relationship(
        'Question', backref='assessment', lazy=True,
        order_by='Question.order', cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f'<Assessment {self.title}>'

    def is_open(self, at=None):
        """Inside the scheduling window"""
        at = at or now_utc()
        if self.available_from and as_utc(self.available_from) > at:
            return False
        if self.available_until and as_utc(self.available_until) <= at:
            return False
        return True

    def question_points(self):
        return sum(q.points or 0 for q in self.questions)

    def to_dict(self, with_questions=False, reveal_answers=True):
        data = {
            'id': self.id,
            'courseId': self.course_id,
            'title': self.title,
            'description': self.description,
            'type': self.type,
            'totalPoints': self.total_points,
            'passingScore': self.passing_score,
            'timeLimit': self.time_limit,
            'maxAttempts': self.max_attempts,
            'shuffleQuestions': self.shuffle_questions,
            'showCorrectAnswers': self.show_correct_answers,
            'isPublished': self.is_published,
            'isVisibleToStudents': self.is_visible_to_students,
            'availableFrom': isoformat(self.available_from),
            'availableUntil': isoformat(self.available_until),
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
        if with_questions:
            data['questions'] = [q.to_dict(reveal_answers=reveal_answers) for q in self.questions]
        return data
