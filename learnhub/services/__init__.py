"""
Services Package
"""
from learnhub.services.scoring_service import ScoringService
from learnhub.services.analytics_service import AnalyticsService
from learnhub.services.user_service import UserService
from learnhub.services.course_service import CourseService
from learnhub.services.content_service import ContentService
from learnhub.services.assessment_service import AssessmentService
from learnhub.services.gradebook_service import GradebookService
from learnhub.services.attempt_service import AttemptService
from learnhub.services.grading_service import GradingService

__all__ = [
    'ScoringService', 'AnalyticsService', 'UserService', 'CourseService',
    'ContentService', 'AssessmentService', 'GradebookService',
    'AttemptService', 'GradingService'
]
