"""
User Routes
Directory of students and tutors (authentication is handled elsewhere)
"""
from flask import Blueprint, jsonify, request

from learnhub.extensions import db
from learnhub.services import UserService
from learnhub.utils import get_json_body, present_fields, require_fields

users_bp = Blueprint('users', __name__)


@users_bp.route('', methods=['GET'])
def list_users():
    """List users, optionally filtered by ?role="""
    users = UserService.list_users(db.session, role=request.args.get('role'))
    return jsonify([u.to_dict() for u in users])


@users_bp.route('', methods=['POST'])
def create_user():
    data = get_json_body()
    email, first_name, last_name, role = require_fields(data, 'email', 'firstName', 'lastName', 'role')
    user = UserService.create_user(
        db.session,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        profile_image=data.get('profileImage'),
        student_id=data.get('studentId'),
        department=data.get('department'),
        title=data.get('title'),
    )
    return jsonify(user.to_dict()), 201


@users_bp.route('/by-email', methods=['GET'])
def get_user_by_email():
    email = request.args.get('email', '')
    user = UserService.get_user_by_email(db.session, email)
    if not user:
        return jsonify({'error': 'not_found', 'message': f'No user with email {email}'}), 404
    return jsonify(user.to_dict())


@users_bp.route('/<int:user_id>', methods=['GET'])
def get_user(user_id):
    return jsonify(UserService.get_user(db.session, user_id).to_dict())


@users_bp.route('/<int:user_id>', methods=['PATCH'])
def update_profile(user_id):
    data = get_json_body()
    user = UserService.update_profile(
        db.session, user_id,
        **present_fields(data, ('firstName', 'lastName', 'profileImage', 'department', 'title'))
    )
    return jsonify(user.to_dict())


@users_bp.route('/<int:user_id>/login', methods=['POST'])
def record_login(user_id):
    return jsonify(UserService.record_login(db.session, user_id).to_dict())


@users_bp.route('/<int:user_id>/deactivate', methods=['POST'])
def deactivate_user(user_id):
    return jsonify(UserService.deactivate_user(db.session, user_id).to_dict())
