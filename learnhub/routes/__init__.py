"""
Routes Package
Exports all route blueprints
"""
from learnhub.routes.users import users_bp
from learnhub.routes.courses import courses_bp
from learnhub.routes.assessments import assessments_bp
from learnhub.routes.attempts import attempts_bp
from learnhub.routes.grading import grading_bp
from learnhub.routes.grades import grades_bp

__all__ = [
    'users_bp', 'courses_bp', 'assessments_bp', 'attempts_bp', 'grading_bp', 'grades_bp'
]
