"""Tests for the flask CLI commands."""

from learnhub.cli import DEMO_STUDENT_EMAIL, DEMO_TUTOR_EMAIL
from learnhub.models import Assessment, Course
from learnhub.services import UserService


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "Database tables created" in result.output


def test_seed_demo_is_idempotent(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed-demo"])
    assert result.exit_code == 0, result.output
    assert "Demo data created" in result.output

    assert UserService.get_user_by_email(session, DEMO_TUTOR_EMAIL).role == "tutor"
    assert UserService.get_user_by_email(session, DEMO_STUDENT_EMAIL).role == "student"
    quiz = session.query(Assessment).one()
    assert quiz.is_published is True
    assert len(quiz.questions) == 2

    result = runner.invoke(args=["seed-demo"])
    assert "already present" in result.output
    assert session.query(Course).count() == 1
