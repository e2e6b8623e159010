"""
Models Package
Exports all database models
"""
from learnhub.models.user import User
from learnhub.models.course import Course, Enrollment
from learnhub.models.content import Note, NoteView, Resource, ResourceAccess
from learnhub.models.assessment import Assessment
from learnhub.models.question import Question
from learnhub.models.attempt import Attempt
from learnhub.models.answer import QuestionResponse
from learnhub.models.result import Grade, CourseGrade
from learnhub.models.stats import StudentStats, ContentAnalytics

__all__ = [
    'User', 'Course', 'Enrollment', 'Note', 'NoteView', 'Resource',
    'ResourceAccess', 'Assessment', 'Question', 'Attempt', 'QuestionResponse',
    'Grade', 'CourseGrade', 'StudentStats', 'ContentAnalytics'
]
