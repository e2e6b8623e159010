"""
Grade Routes
Grade book, student stats, leaderboard and course analytics
"""
from flask import Blueprint, jsonify, request

from learnhub.extensions import db
from learnhub.services import GradebookService

grades_bp = Blueprint('grades', __name__)


def _with_details(grade):
    data = grade.to_dict()
    data['assessment'] = grade.assessment.to_dict() if grade.assessment else None
    data['course'] = grade.course.to_dict() if grade.course else None
    return data


@grades_bp.route('/student/<int:user_id>', methods=['GET'])
def student_grades(user_id):
    """All grades of a student, optionally ?courseId="""
    grades = GradebookService.grades_for_student(
        db.session, user_id, course_id=request.args.get('courseId', type=int)
    )
    return jsonify([_with_details(g) for g in grades])


@grades_bp.route('/student/<int:user_id>/course/<int:course_id>/summary', methods=['GET'])
def course_summary(user_id, course_id):
    return jsonify(GradebookService.course_grade_summary(db.session, user_id, course_id))


@grades_bp.route('/assessment/<int:assessment_id>', methods=['GET'])
def assessment_grades(assessment_id):
    grades = GradebookService.grades_for_assessment(db.session, assessment_id)
    return jsonify([
        dict(g.to_dict(), student=g.student.to_dict() if g.student else None)
        for g in grades
    ])


@grades_bp.route('/stats/<int:user_id>', methods=['GET'])
def student_stats(user_id):
    return jsonify(GradebookService.get_student_stats(db.session, user_id).to_dict())


@grades_bp.route('/leaderboard', methods=['GET'])
def leaderboard():
    return jsonify(GradebookService.leaderboard(db.session, limit=request.args.get('limit', type=int)))


@grades_bp.route('/analytics/course/<int:course_id>', methods=['GET'])
def course_analytics(course_id):
    return jsonify(GradebookService.course_analytics(db.session, course_id))
