"""
Attempt Model
One student's submission instance for an assessment

Status flow:
    in_progress -> graded                      (everything auto-graded)
    in_progress -> submitted -> graded         (manual grading)
    submitted <-> grading                      (tutor claim / release)
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc, as_utc, isoformat

IN_PROGRESS = 'in_progress'
SUBMITTED = 'submitted'
GRADING = 'grading'
GRADED = 'graded'

ATTEMPT_STATUSES = (IN_PROGRESS, SUBMITTED, GRADING, GRADED)


class Attempt(db.Model):
    """Assessment attempt model"""
    __tablename__ = 'attempt'

    id = db.Column(db.Integer, primary_key=True)
    assessment_id = db.Column(db.Integer, db.ForeignKey('assessment.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    attempt_number = db.Column(db.Integer, nullable=False)

    # Timing
    started_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    submitted_at = db.Column(db.DateTime(timezone=True))

    status = db.Column(db.String(20), nullable=False, default=IN_PROGRESS, index=True)

    # Results
    total_score = db.Column(db.Float)
    percentage = db.Column(db.Float)
    is_passed = db.Column(db.Boolean)

    # Grading info
    graded_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    graded_at = db.Column(db.DateTime(timezone=True))
    feedback = db.Column(db.Text)  # overall feedback

    # Claim lock while a tutor grades
    grading_claimed_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    grading_claimed_at = db.Column(db.DateTime(timezone=True))

    version = db.Column(db.Integer, nullable=False)

    # Relationships
    assessment = db.relationship('Assessment', lazy='joined')
    user = db.relationship('User', foreign_keys=[user_id], lazy='joined')
    responses = db.relationship(
        'QuestionResponse', backref='attempt', lazy=True,
        order_by='QuestionResponse.id', cascade='all, delete-orphan'
    )

    __table_args__ = (
        db.UniqueConstraint(
            'assessment_id', 'user_id', 'attempt_number',
            name='unique_attempt_number'
        ),
    )
    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<Attempt #{self.attempt_number} of A{self.assessment_id} by U{self.user_id} ({self.status})>'

    def time_spent_seconds(self):
        if not (self.started_at and self.submitted_at):
            return None
        elapsed = as_utc(self.submitted_at) - as_utc(self.started_at)
        return max(0, int(elapsed.total_seconds()))

    def to_dict(self, with_responses=False):
        data = {
            'id': self.id,
            'assessmentId': self.assessment_id,
            'userId': self.user_id,
            'attemptNumber': self.attempt_number,
            'startedAt': isoformat(self.started_at),
            'submittedAt': isoformat(self.submitted_at),
            'status': self.status,
            'totalScore': self.total_score,
            'percentage': self.percentage,
            'isPassed': self.is_passed,
            'gradedBy': self.graded_by,
            'gradedAt': isoformat(self.graded_at),
            'feedback': self.feedback,
            'gradingClaimedBy': self.grading_claimed_by,
        }
        if with_responses:
            data['responses'] = [r.to_dict() for r in self.responses]
        return data
