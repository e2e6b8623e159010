"""
CLI Commands
flask init-db / flask seed-demo
"""
import logging

import click

from learnhub.extensions import db

logger = logging.getLogger(__name__)

DEMO_TUTOR_EMAIL = 'tutor@learnhub.local'
DEMO_STUDENT_EMAIL = 'student@learnhub.local'


def seed_demo(session):
    """Insert a small demo course; returns False if it already exists"""
    from learnhub.services import (
        AssessmentService, ContentService, CourseService, UserService
    )

    if UserService.get_user_by_email(session, DEMO_TUTOR_EMAIL):
        return False

    tutor = UserService.create_user(
        session, DEMO_TUTOR_EMAIL, 'Demo', 'Tutor', 'tutor', title='Lecturer'
    )
    student = UserService.create_user(
        session, DEMO_STUDENT_EMAIL, 'Demo', 'Student', 'student', student_id='S-0001'
    )

    course = CourseService.create_course(
        session, 'DEMO101', 'Introduction to LearnHub', tutor.id,
        description='A sample course with one note and one quiz'
    )
    CourseService.set_course_published(session, course.id, True)
    CourseService.enroll_student(session, student.id, course.id)

    note = ContentService.create_note(
        session, course.id, 'Welcome', 'Read this before taking the quiz.', tutor.id
    )
    ContentService.set_note_visibility(session, note.id, True, True)

    quiz = AssessmentService.create_assessment(
        session, course.id, 'Getting started quiz', 'quiz', 10, tutor.id,
        passing_score=60, max_attempts=3
    )
    AssessmentService.add_question(
        session, quiz.id, 'multiple_choice', 'Which role grades written answers?', 5,
        options=[
            {'id': 'a', 'text': 'Student', 'isCorrect': False},
            {'id': 'b', 'text': 'Tutor', 'isCorrect': True},
        ]
    )
    AssessmentService.add_question(
        session, quiz.id, 'written', 'Describe what you expect from this course.', 5,
        rubric='Full marks for a clear, complete answer'
    )
    AssessmentService.set_assessment_visibility(session, quiz.id, True, True)
    logger.info("Seeded demo course %s", course.code)
    return True


def register_commands(app):
    """Attach CLI commands to the app"""

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('Database tables created')

    @app.cli.command('seed-demo')
    def seed_demo_command():
        """Insert demo users, a course, a note and a quiz."""
        if seed_demo(db.session):
            click.echo('Demo data created')
        else:
            click.echo('Demo data already present, skipping')
