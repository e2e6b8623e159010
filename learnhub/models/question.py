"""
Question Model
Question types: multiple_choice, true_false, short_answer, written, file_upload
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc
import json

QUESTION_TYPES = ('multiple_choice', 'true_false', 'short_answer', 'written', 'file_upload')

# Types that carry a list of options
CHOICE_TYPES = ('multiple_choice', 'true_false')


class Question(db.Model):
    """Question model"""
    __tablename__ = 'question'

    id = db.Column(db.Integer, primary_key=True)
    assessment_id = db.Column(db.Integer, db.ForeignKey('assessment.id'), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False)

    # Question content
    question = db.Column(db.Text, nullable=False)
    explanation = db.Column(db.Text)  # shown after grading
    points = db.Column(db.Float, nullable=False, default=1.0)
    order = db.Column(db.Integer, default=0)

    # Options (for multiple_choice and true_false), JSON list of
    # {"id", "text", "isCorrect"}
    options = db.Column(db.Text)

    # Expected answer hints for tutors (written / short answer)
    rubric = db.Column(db.Text)

    # File upload constraints
    allowed_file_types = db.Column(db.Text)  # JSON list, e.g. [".py", ".java"]
    max_file_size = db.Column(db.Integer)  # bytes

    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    def __repr__(self):
        return f'<Question {self.id}: {self.question[:50]}...>'

    @property
    def is_choice(self):
        return self.type in CHOICE_TYPES

    def get_options(self):
        """Get options as list of dicts"""
        if not self.options:
            return []
        return json.loads(self.options)

    def set_options(self, options):
        self.options = json.dumps(options) if options else None

    def find_option(self, option_id):
        for option in self.get_options():
            if option.get('id') == option_id:
                return option
        return None

    def get_allowed_file_types(self):
        if not self.allowed_file_types:
            return []
        return json.loads(self.allowed_file_types)

    def set_allowed_file_types(self, file_types):
        self.allowed_file_types = json.dumps(file_types) if file_types else None

    def to_dict(self, reveal_answers=True):
        options = self.get_options()
        if not reveal_answers:
            options = [{'id': o['id'], 'text': o['text']} for o in options]
        return {
            'id': self.id,
            'assessmentId': self.assessment_id,
            'type': self.type,
            'question': self.question,
            'explanation': self.explanation if reveal_answers else None,
            'points': self.points,
            'order': self.order,
            'options': options,
            'rubric': self.rubric if reveal_answers else None,
            'allowedFileTypes': self.get_allowed_file_types(),
            'maxFileSize': self.max_file_size,
        }
