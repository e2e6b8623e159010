"""
Attempt Routes
Student side of an assessment: start, answer, submit
"""
from flask import Blueprint, jsonify, request

from learnhub.extensions import db
from learnhub.services import AttemptService
from learnhub.utils import get_json_body, require_fields

attempts_bp = Blueprint('attempts', __name__)


@attempts_bp.route('', methods=['POST'])
def start_attempt():
    data = get_json_body()
    assessment_id, user_id = require_fields(data, 'assessmentId', 'userId')
    attempt = AttemptService.start_attempt(db.session, assessment_id, user_id)
    return jsonify({'attemptId': attempt.id, 'attemptNumber': attempt.attempt_number}), 201


@attempts_bp.route('', methods=['GET'])
def list_attempts():
    attempts = AttemptService.list_attempts(
        db.session,
        assessment_id=request.args.get('assessmentId', type=int),
        user_id=request.args.get('userId', type=int),
    )
    return jsonify([a.to_dict() for a in attempts])


@attempts_bp.route('/<int:attempt_id>', methods=['GET'])
def get_attempt(attempt_id):
    attempt = AttemptService.get_attempt(db.session, attempt_id)
    return jsonify(attempt.to_dict(with_responses=True))


@attempts_bp.route('/<int:attempt_id>/responses', methods=['POST'])
def submit_response(attempt_id):
    """Answer one question: one of selectedOptionId, textResponse, fileRef"""
    data = get_json_body()
    question_id, = require_fields(data, 'questionId')
    response = AttemptService.submit_response(
        db.session, attempt_id, question_id,
        selected_option_id=data.get('selectedOptionId'),
        text_response=data.get('textResponse'),
        file_ref=data.get('fileRef'),
    )
    return jsonify({'responseId': response.id}), 201


@attempts_bp.route('/<int:attempt_id>/submit', methods=['POST'])
def submit_attempt(attempt_id):
    attempt = AttemptService.submit_attempt(db.session, attempt_id)
    return jsonify({'attemptId': attempt.id, 'status': attempt.status})
