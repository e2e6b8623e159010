"""Shared pytest fixtures.

Provides:
- ``app``: Flask app on an in-memory SQLite database, context pushed
- ``session``: the Flask-SQLAlchemy session services write through
- ``client``: Flask test client
- ``tutor`` / ``student`` / ``course``: baseline records
- ``make_user`` / ``make_assessment`` / ``add_choice`` / ``add_written``: factories
"""

import pytest

from learnhub import create_app
from learnhub.extensions import db
from learnhub.services import AssessmentService, CourseService, UserService


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(role="student", **kwargs):
        counter["n"] += 1
        kwargs.setdefault("email", f"{role}{counter['n']}@example.com")
        kwargs.setdefault("first_name", role.capitalize())
        kwargs.setdefault("last_name", str(counter["n"]))
        return UserService.create_user(session, role=role, **kwargs)

    return _make


@pytest.fixture
def tutor(make_user):
    return make_user("tutor")


@pytest.fixture
def student(make_user):
    return make_user("student")


@pytest.fixture
def course(session, tutor):
    return CourseService.create_course(session, "cs101", "Intro to Computing", tutor.id)


@pytest.fixture
def make_assessment(session, course, tutor):
    def _make(total_points=10, **kwargs):
        kwargs.setdefault("title", "Week 1 quiz")
        kwargs.setdefault("type", "quiz")
        return AssessmentService.create_assessment(
            session,
            course_id=course.id,
            total_points=total_points,
            created_by=tutor.id,
            **kwargs
        )

    return _make


@pytest.fixture
def add_choice(session):
    """Two-option multiple choice question; option 'b' is correct"""
    def _add(assessment, points=5):
        return AssessmentService.add_question(
            session, assessment.id, "multiple_choice", "Pick b", points,
            options=[
                {"id": "a", "text": "A", "isCorrect": False},
                {"id": "b", "text": "B", "isCorrect": True},
            ],
        )

    return _add


@pytest.fixture
def add_written(session):
    def _add(assessment, points=5, **kwargs):
        return AssessmentService.add_question(
            session, assessment.id, "written", "Explain recursion", points, **kwargs
        )

    return _add
