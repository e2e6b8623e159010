"""
QuestionResponse Model
Stores one answer per question per attempt
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc, isoformat


class QuestionResponse(db.Model):
    """Question response model"""
    __tablename__ = 'question_response'

    id = db.Column(db.Integer, primary_key=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey('attempt.id'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=False, index=True)

    # Response content
    selected_option_id = db.Column(db.String(100))
    text_response = db.Column(db.Text)
    file_ref = db.Column(db.String(255))

    # Auto-grading
    is_auto_graded = db.Column(db.Boolean, nullable=False, default=False)
    is_correct = db.Column(db.Boolean)

    # Manual grading
    points_awarded = db.Column(db.Float)
    feedback = db.Column(db.Text)
    graded_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    graded_at = db.Column(db.DateTime(timezone=True))

    answered_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    question = db.relationship('Question', lazy='joined')

    __table_args__ = (
        db.UniqueConstraint(
            'attempt_id', 'question_id',
            name='unique_response_per_question'
        ),
    )

    def __repr__(self):
        return f'<QuestionResponse Q{self.question_id} in attempt {self.attempt_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'attemptId': self.attempt_id,
            'questionId': self.question_id,
            'selectedOptionId': self.selected_option_id,
            'textResponse': self.text_response,
            'fileRef': self.file_ref,
            'isAutoGraded': self.is_auto_graded,
            'isCorrect': self.is_correct,
            'pointsAwarded': self.points_awarded,
            'feedback': self.feedback,
            'gradedBy': self.graded_by,
            'gradedAt': isoformat(self.graded_at),
            'answeredAt': isoformat(self.answered_at),
        }
