"""
Error Taxonomy
Domain exceptions raised by the services and their JSON rendering
"""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from learnhub.extensions import db

logger = logging.getLogger(__name__)


class LearnHubError(Exception):
    """Base class for errors surfaced to the caller"""
    status_code = 400
    code = "error"

    def __init__(self, message=None):
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class NotFoundError(LearnHubError):
    """Referenced record does not exist"""
    status_code = 404
    code = "not_found"

    def __init__(self, entity, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ValidationError(LearnHubError):
    """Request is malformed or violates a definition rule"""
    status_code = 400
    code = "validation_error"


class DuplicateError(LearnHubError):
    """A record with the same unique key already exists"""
    status_code = 409
    code = "duplicate"


class AttemptLimitExceeded(LearnHubError):
    """Maximum attempts reached"""
    status_code = 409
    code = "attempt_limit_exceeded"


class AttemptClosedError(LearnHubError):
    """Attempt is not in a state that allows this operation"""
    status_code = 409
    code = "attempt_closed"


class AlreadyGradedError(LearnHubError):
    """Attempt has already been graded"""
    status_code = 409
    code = "already_graded"


class GradingClaimedError(LearnHubError):
    """Attempt is being graded by another tutor"""
    status_code = 409
    code = "grading_claimed"


class InvalidGradeError(LearnHubError):
    """Awarded points are out of range or missing"""
    status_code = 400
    code = "invalid_grade"


class AssessmentUnavailableError(LearnHubError):
    """Assessment is outside its availability window"""
    status_code = 403
    code = "assessment_unavailable"


class ConcurrencyConflict(LearnHubError):
    """Record was modified concurrently, retry the request"""
    status_code = 409
    code = "conflict"


class AggregateMissing(Exception):
    """
    No aggregate row exists (or can exist) for the target.
    Internal only: callers skip the update, it is never rendered.
    """

    def __init__(self, kind, key):
        self.kind = kind
        self.key = key
        super().__init__(f"no {kind} aggregate for {key}")


def register_error_handlers(app):
    """Render domain and HTTP errors as JSON"""

    @app.errorhandler(LearnHubError)
    def handle_learnhub_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            logger.error("Request failed: %s", error.message)
        else:
            logger.warning("Rejected (%s): %s", error.code, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            "error": error.name.lower().replace(" ", "_"),
            "message": error.description,
        }), error.code
