"""Tests for grade-book queries, leaderboard and course analytics."""

import pytest

from learnhub.errors import NotFoundError, ValidationError
from learnhub.services import AttemptService, ContentService, GradebookService


def _take(session, assessment, question, student_id, option):
    attempt = AttemptService.start_attempt(session, assessment.id, student_id)
    AttemptService.submit_response(session, attempt.id, question.id, selected_option_id=option)
    return AttemptService.submit_attempt(session, attempt.id)


@pytest.fixture
def quiz(make_assessment, add_choice):
    assessment = make_assessment(total_points=5, passing_score=50)
    return assessment, add_choice(assessment, points=5)


def test_grades_for_student_newest_first(session, quiz, student, course):
    assessment, question = quiz
    first = _take(session, assessment, question, student.id, "a")
    second = _take(session, assessment, question, student.id, "b")

    grades = GradebookService.grades_for_student(session, student.id)
    assert [g.attempt_id for g in grades] == [second.id, first.id]
    assert GradebookService.grades_for_student(session, student.id, course_id=course.id + 1) == []


def test_course_summary(session, quiz, student, course):
    assessment, question = quiz
    _take(session, assessment, question, student.id, "a")
    _take(session, assessment, question, student.id, "b")

    summary = GradebookService.course_grade_summary(session, student.id, course.id)
    assert summary["courseGrade"]["percentage"] == 100
    assert summary["stats"]["totalGrades"] == 2
    assert summary["stats"]["averagePercentage"] == 50
    assert summary["stats"]["lowestGrade"] == 0


def test_summary_without_grades(session, student, course):
    summary = GradebookService.course_grade_summary(session, student.id, course.id)
    assert summary["courseGrade"] is None
    assert summary["stats"]["totalGrades"] == 0


def test_grades_for_assessment(session, quiz, make_user):
    assessment, question = quiz
    for option in ("a", "b"):
        _take(session, assessment, question, make_user().id, option)
    assert len(GradebookService.grades_for_assessment(session, assessment.id)) == 2


def test_student_stats_lookup(session, student, tutor):
    assert GradebookService.get_student_stats(session, student.id).user_id == student.id
    with pytest.raises(NotFoundError):
        GradebookService.get_student_stats(session, tutor.id)


def test_leaderboard_ranks_by_average(session, quiz, make_user):
    assessment, question = quiz
    weak = make_user()
    strong = make_user()
    _take(session, assessment, question, weak.id, "a")
    _take(session, assessment, question, strong.id, "b")

    board = GradebookService.leaderboard(session)
    assert [row["user"]["id"] for row in board] == [strong.id, weak.id]
    assert [row["rank"] for row in board] == [1, 2]
    assert board[0]["stats"]["averageScore"] == 100
    assert len(GradebookService.leaderboard(session, limit=1)) == 1
    with pytest.raises(ValidationError):
        GradebookService.leaderboard(session, limit=0)


def test_course_analytics(session, quiz, student, course, tutor):
    assessment, question = quiz
    _take(session, assessment, question, student.id, "b")
    note = ContentService.create_note(session, course.id, "Intro", "", tutor.id)
    ContentService.record_note_view(session, note.id, student.id)

    analytics = GradebookService.course_analytics(session, course.id)
    assert analytics["notes"]["totalViews"] == 1
    assert analytics["assessments"]["totalCompletions"] == 1
    assert analytics["assessments"]["averageScore"] == 100
    assert analytics["assessments"]["averagePassRate"] == 100
    assert analytics["resources"]["items"] == []
