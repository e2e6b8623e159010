"""
Assessment Routes
Assessment definitions, questions and tutor statistics
"""
from flask import Blueprint, jsonify, request

from learnhub.extensions import db
from learnhub.services import AssessmentService
from learnhub.utils import get_json_body, parse_datetime, present_fields, require_fields

assessments_bp = Blueprint('assessments', __name__)

ASSESSMENT_KEYS = (
    'title', 'description', 'totalPoints', 'passingScore', 'timeLimit', 'maxAttempts',
    'shuffleQuestions', 'showCorrectAnswers', 'availableFrom', 'availableUntil'
)
QUESTION_KEYS = (
    'question', 'explanation', 'points', 'order', 'options', 'rubric',
    'allowedFileTypes', 'maxFileSize'
)


def _settings(data):
    return dict(
        description=data.get('description'),
        passing_score=data.get('passingScore'),
        time_limit=data.get('timeLimit'),
        max_attempts=data.get('maxAttempts'),
        available_from=parse_datetime(data.get('availableFrom'), 'availableFrom'),
        available_until=parse_datetime(data.get('availableUntil'), 'availableUntil'),
    )


@assessments_bp.route('/course/<int:course_id>', methods=['GET'])
def list_assessments(course_id):
    include_unpublished = request.args.get('includeUnpublished', '').lower() in ('1', 'true', 'yes')
    assessments = AssessmentService.list_assessments(db.session, course_id, include_unpublished)
    return jsonify([a.to_dict() for a in assessments])


@assessments_bp.route('', methods=['POST'])
def create_assessment():
    data = get_json_body()
    course_id, title, assessment_type, total_points, created_by = require_fields(
        data, 'courseId', 'title', 'type', 'totalPoints', 'createdBy'
    )
    assessment = AssessmentService.create_assessment(
        db.session,
        course_id=course_id,
        title=title,
        type=assessment_type,
        total_points=total_points,
        created_by=created_by,
        shuffle_questions=data.get('shuffleQuestions', False),
        show_correct_answers=data.get('showCorrectAnswers', False),
        **_settings(data)
    )
    return jsonify(assessment.to_dict()), 201


@assessments_bp.route('/<int:assessment_id>', methods=['GET'])
def get_assessment(assessment_id):
    """Assessment with questions; ?student=1 hides correct answers"""
    assessment, questions = AssessmentService.get_assessment_with_questions(db.session, assessment_id)
    reveal = request.args.get('student', '').lower() not in ('1', 'true', 'yes')
    data = assessment.to_dict()
    data['questions'] = [q.to_dict(reveal_answers=reveal) for q in questions]
    data['questionPointsMismatch'] = AssessmentService.question_points_mismatch(assessment)
    return jsonify(data)


@assessments_bp.route('/<int:assessment_id>', methods=['PATCH'])
def update_assessment(assessment_id):
    data = get_json_body()
    assessment = AssessmentService.update_assessment(
        db.session, assessment_id,
        **present_fields(data, ASSESSMENT_KEYS, timestamps=('availableFrom', 'availableUntil'))
    )
    return jsonify(assessment.to_dict())


@assessments_bp.route('/<int:assessment_id>/visibility', methods=['POST'])
def set_visibility(assessment_id):
    data = get_json_body()
    is_published, is_visible = require_fields(data, 'isPublished', 'isVisibleToStudents')
    assessment = AssessmentService.set_assessment_visibility(db.session, assessment_id, is_published, is_visible)
    return jsonify(assessment.to_dict())


@assessments_bp.route('/<int:assessment_id>', methods=['DELETE'])
def delete_assessment(assessment_id):
    AssessmentService.delete_assessment(db.session, assessment_id)
    return '', 204


@assessments_bp.route('/<int:assessment_id>/stats', methods=['GET'])
def assessment_stats(assessment_id):
    return jsonify(AssessmentService.get_assessment_stats(db.session, assessment_id))


# ================= QUESTIONS =================

@assessments_bp.route('/<int:assessment_id>/questions', methods=['POST'])
def add_question(assessment_id):
    data = get_json_body()
    question_type, text, points = require_fields(data, 'type', 'question', 'points')
    question = AssessmentService.add_question(
        db.session,
        assessment_id=assessment_id,
        type=question_type,
        question=text,
        points=points,
        order=data.get('order'),
        explanation=data.get('explanation'),
        options=data.get('options'),
        correct_answer=data.get('correctAnswer'),
        rubric=data.get('rubric'),
        allowed_file_types=data.get('allowedFileTypes'),
        max_file_size=data.get('maxFileSize'),
    )
    return jsonify(question.to_dict()), 201


@assessments_bp.route('/<int:assessment_id>/questions/order', methods=['POST'])
def reorder_questions(assessment_id):
    data = get_json_body()
    question_ids, = require_fields(data, 'questionIds')
    questions = AssessmentService.reorder_questions(db.session, assessment_id, question_ids)
    return jsonify([q.to_dict() for q in questions])


@assessments_bp.route('/questions/<int:question_id>', methods=['PATCH'])
def update_question(question_id):
    data = get_json_body()
    question = AssessmentService.update_question(
        db.session, question_id,
        **present_fields(data, QUESTION_KEYS)
    )
    return jsonify(question.to_dict())


@assessments_bp.route('/questions/<int:question_id>', methods=['DELETE'])
def delete_question(question_id):
    AssessmentService.delete_question(db.session, question_id)
    return '', 204
