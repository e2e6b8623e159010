"""
Grading Routes
Tutor side of an assessment: pending queue, claims, points, finalization
"""
from flask import Blueprint, current_app, jsonify, request

from learnhub.extensions import db
from learnhub.services import GradingService
from learnhub.utils import get_json_body, require_fields

grading_bp = Blueprint('grading', __name__)


@grading_bp.route('/pending', methods=['GET'])
def pending():
    page_size = current_app.config['PENDING_GRADING_PAGE_SIZE']
    limit = min(request.args.get('limit', page_size, type=int), page_size)
    return jsonify(GradingService.list_pending_grading(db.session, limit=limit))


@grading_bp.route('/attempts/<int:attempt_id>/claim', methods=['POST'])
def claim(attempt_id):
    data = get_json_body()
    grader_id, = require_fields(data, 'graderId')
    attempt = GradingService.claim_attempt(db.session, attempt_id, grader_id)
    return jsonify(attempt.to_dict())


@grading_bp.route('/attempts/<int:attempt_id>/release', methods=['POST'])
def release(attempt_id):
    data = get_json_body()
    grader_id, = require_fields(data, 'graderId')
    attempt = GradingService.release_attempt(db.session, attempt_id, grader_id)
    return jsonify(attempt.to_dict())


@grading_bp.route('/responses/<int:response_id>', methods=['POST'])
def grade_response(response_id):
    data = get_json_body()
    points_awarded, grader_id = require_fields(data, 'pointsAwarded', 'graderId')
    GradingService.grade_response(
        db.session, response_id, points_awarded, grader_id,
        feedback=data.get('feedback'),
    )
    return '', 204


@grading_bp.route('/attempts/<int:attempt_id>/finalize', methods=['POST'])
def finalize(attempt_id):
    data = get_json_body()
    grader_id, = require_fields(data, 'graderId')
    attempt = GradingService.finalize_grading(
        db.session, attempt_id, grader_id,
        feedback=data.get('feedback'),
    )
    return jsonify({'attemptId': attempt.id})
