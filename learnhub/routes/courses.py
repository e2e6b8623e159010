"""
Course Routes
Courses, enrollment, notes and resources
"""
from flask import Blueprint, jsonify, request

from learnhub.extensions import db
from learnhub.services import ContentService, CourseService
from learnhub.utils import get_json_body, parse_datetime, present_fields, require_fields

courses_bp = Blueprint('courses', __name__)

RESOURCE_KEYS = (
    'title', 'description', 'type', 'fileRef', 'url', 'category', 'order',
    'availableFrom', 'expiresAt'
)


def _flag(name):
    return request.args.get(name, '').lower() in ('1', 'true', 'yes')


# ================= COURSES =================

@courses_bp.route('', methods=['GET'])
def list_courses():
    """Published courses, or ?tutorId= for a tutor's own courses"""
    tutor_id = request.args.get('tutorId', type=int)
    if tutor_id is not None:
        courses = CourseService.list_courses_by_tutor(db.session, tutor_id)
    else:
        courses = CourseService.list_published_courses(db.session)
    return jsonify([c.to_dict() for c in courses])


@courses_bp.route('', methods=['POST'])
def create_course():
    data = get_json_body()
    code, name, created_by = require_fields(data, 'code', 'name', 'createdBy')
    course = CourseService.create_course(
        db.session,
        code=code,
        name=name,
        created_by=created_by,
        description=data.get('description', ''),
        cover_image=data.get('coverImage'),
        start_date=parse_datetime(data.get('startDate'), 'startDate'),
        end_date=parse_datetime(data.get('endDate'), 'endDate'),
    )
    return jsonify(course.to_dict()), 201


@courses_bp.route('/<int:course_id>', methods=['GET'])
def get_course(course_id):
    return jsonify(CourseService.get_course(db.session, course_id).to_dict())


@courses_bp.route('/<int:course_id>', methods=['PATCH'])
def update_course(course_id):
    data = get_json_body()
    course = CourseService.update_course(
        db.session, course_id,
        **present_fields(
            data, ('name', 'description', 'coverImage', 'startDate', 'endDate'),
            timestamps=('startDate', 'endDate')
        )
    )
    return jsonify(course.to_dict())


@courses_bp.route('/<int:course_id>/publish', methods=['POST'])
def set_published(course_id):
    data = get_json_body()
    course = CourseService.set_course_published(db.session, course_id, data.get('isPublished', True))
    return jsonify(course.to_dict())


@courses_bp.route('/<int:course_id>/archive', methods=['POST'])
def archive_course(course_id):
    return jsonify(CourseService.archive_course(db.session, course_id).to_dict())


# ================= ENROLLMENT =================

@courses_bp.route('/<int:course_id>/enrollments', methods=['POST'])
def enroll(course_id):
    data = get_json_body()
    user_id, = require_fields(data, 'userId')
    enrollment = CourseService.enroll_student(db.session, user_id, course_id)
    return jsonify(enrollment.to_dict()), 201


@courses_bp.route('/<int:course_id>/enrollments/<int:user_id>/progress', methods=['POST'])
def update_progress(course_id, user_id):
    data = get_json_body()
    progress, = require_fields(data, 'progress')
    enrollment = CourseService.update_progress(db.session, user_id, course_id, progress)
    return jsonify(enrollment.to_dict())


@courses_bp.route('/enrolled/<int:user_id>', methods=['GET'])
def enrolled_courses(user_id):
    enrollments = CourseService.list_enrolled_courses(db.session, user_id)
    return jsonify([
        dict(e.course.to_dict(), enrollment=e.to_dict())
        for e in enrollments
    ])


# ================= NOTES =================

@courses_bp.route('/<int:course_id>/notes', methods=['GET'])
def list_notes(course_id):
    notes = ContentService.list_notes(db.session, course_id, include_unpublished=_flag('includeUnpublished'))
    return jsonify([n.to_dict() for n in notes])


@courses_bp.route('/<int:course_id>/notes', methods=['POST'])
def create_note(course_id):
    data = get_json_body()
    title, created_by = require_fields(data, 'title', 'createdBy')
    note = ContentService.create_note(
        db.session,
        course_id=course_id,
        title=title,
        content=data.get('content', ''),
        created_by=created_by,
        order=data.get('order', 0),
        publish_at=parse_datetime(data.get('publishAt'), 'publishAt'),
        expires_at=parse_datetime(data.get('expiresAt'), 'expiresAt'),
    )
    return jsonify(note.to_dict()), 201


@courses_bp.route('/notes/<int:note_id>', methods=['GET'])
def get_note(note_id):
    return jsonify(ContentService.get_note(db.session, note_id).to_dict())


@courses_bp.route('/notes/<int:note_id>', methods=['PATCH'])
def update_note(note_id):
    data = get_json_body()
    note = ContentService.update_note(
        db.session, note_id,
        **present_fields(
            data, ('title', 'content', 'order', 'publishAt', 'expiresAt'),
            timestamps=('publishAt', 'expiresAt')
        )
    )
    return jsonify(note.to_dict())


@courses_bp.route('/notes/<int:note_id>/visibility', methods=['POST'])
def set_note_visibility(note_id):
    data = get_json_body()
    is_published, is_visible = require_fields(data, 'isPublished', 'isVisibleToStudents')
    note = ContentService.set_note_visibility(db.session, note_id, is_published, is_visible)
    return jsonify(note.to_dict())


@courses_bp.route('/notes/<int:note_id>', methods=['DELETE'])
def delete_note(note_id):
    ContentService.delete_note(db.session, note_id)
    return '', 204


@courses_bp.route('/notes/<int:note_id>/views', methods=['POST'])
def record_note_view(note_id):
    data = get_json_body()
    user_id, = require_fields(data, 'userId')
    ContentService.record_note_view(db.session, note_id, user_id, duration=data.get('duration'))
    return '', 204


# ================= RESOURCES =================

@courses_bp.route('/<int:course_id>/resources', methods=['GET'])
def list_resources(course_id):
    resources = ContentService.list_resources(
        db.session, course_id,
        include_unpublished=_flag('includeUnpublished'),
        category=request.args.get('category'),
    )
    return jsonify([r.to_dict() for r in resources])


@courses_bp.route('/<int:course_id>/resources/categories', methods=['GET'])
def resource_categories(course_id):
    return jsonify(ContentService.list_resource_categories(db.session, course_id))


@courses_bp.route('/<int:course_id>/resources', methods=['POST'])
def create_resource(course_id):
    data = get_json_body()
    title, resource_type, created_by = require_fields(data, 'title', 'type', 'createdBy')
    resource = ContentService.create_resource(
        db.session,
        course_id=course_id,
        title=title,
        type=resource_type,
        created_by=created_by,
        description=data.get('description'),
        file_ref=data.get('fileRef'),
        url=data.get('url'),
        category=data.get('category'),
        order=data.get('order', 0),
        available_from=parse_datetime(data.get('availableFrom'), 'availableFrom'),
        expires_at=parse_datetime(data.get('expiresAt'), 'expiresAt'),
    )
    return jsonify(resource.to_dict()), 201


@courses_bp.route('/resources/<int:resource_id>', methods=['PATCH'])
def update_resource(resource_id):
    data = get_json_body()
    resource = ContentService.update_resource(
        db.session, resource_id,
        **present_fields(data, RESOURCE_KEYS, timestamps=('availableFrom', 'expiresAt'))
    )
    return jsonify(resource.to_dict())


@courses_bp.route('/resources/<int:resource_id>/visibility', methods=['POST'])
def set_resource_visibility(resource_id):
    data = get_json_body()
    is_published, is_visible = require_fields(data, 'isPublished', 'isVisibleToStudents')
    resource = ContentService.set_resource_visibility(db.session, resource_id, is_published, is_visible)
    return jsonify(resource.to_dict())


@courses_bp.route('/resources/<int:resource_id>', methods=['DELETE'])
def delete_resource(resource_id):
    ContentService.delete_resource(db.session, resource_id)
    return '', 204


@courses_bp.route('/resources/<int:resource_id>/access', methods=['POST'])
def record_resource_access(resource_id):
    data = get_json_body()
    user_id, = require_fields(data, 'userId')
    ContentService.record_resource_access(db.session, resource_id, user_id, data.get('action', 'view'))
    return '', 204
