"""
Content Service
Course notes and resources, with view tracking
"""
import logging

from learnhub.errors import NotFoundError, ValidationError
from learnhub.models import Note, NoteView, Resource, ResourceAccess
from learnhub.models.content import ACCESS_ACTIONS, RESOURCE_TYPES
from learnhub.services.analytics_service import AnalyticsService
from learnhub.services.course_service import CourseService
from learnhub.services.user_service import UserService
from learnhub.utils import apply_updates, as_utc, atomic, now_utc

logger = logging.getLogger(__name__)

NOTE_FIELDS = ('title', 'content', 'order', 'publish_at', 'expires_at')
NOTE_CLEARABLE = ('publish_at', 'expires_at')
RESOURCE_FIELDS = (
    'title', 'description', 'type', 'file_ref', 'url', 'category', 'order',
    'available_from', 'expires_at'
)
RESOURCE_CLEARABLE = (
    'description', 'file_ref', 'url', 'category', 'available_from', 'expires_at'
)


def _check_window(opens_at, closes_at):
    if opens_at and closes_at and as_utc(closes_at) <= as_utc(opens_at):
        raise ValidationError('Content must expire after it becomes available')


class ContentService:
    """Notes and resources"""

    # ================= NOTES =================

    @staticmethod
    def get_note(session, note_id):
        note = session.get(Note, note_id)
        if not note:
            raise NotFoundError('Note', note_id)
        return note

    @staticmethod
    def list_notes(session, course_id, include_unpublished=False):
        """Notes of a course in display order; students only see available ones"""
        notes = session.query(Note).filter_by(course_id=course_id).order_by(Note.order, Note.id).all()
        if include_unpublished:
            return notes
        now = now_utc()
        return [n for n in notes if n.is_available(now)]

    @staticmethod
    @atomic
    def create_note(session, course_id, title, content, created_by, order=0,
                    publish_at=None, expires_at=None):
        CourseService.get_course(session, course_id)
        UserService.get_user(session, created_by)
        if not title:
            raise ValidationError('Note title is required')
        _check_window(publish_at, expires_at)

        now = now_utc()
        note = Note(
            course_id=course_id,
            title=title,
            content=content or '',
            order=order,
            created_by=created_by,
            is_published=False,
            is_visible_to_students=False,
            publish_at=publish_at,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )
        session.add(note)
        session.flush()
        return note

    @staticmethod
    @atomic
    def update_note(session, note_id, **fields):
        note = ContentService.get_note(session, note_id)
        apply_updates(note, fields, NOTE_FIELDS, clearable=NOTE_CLEARABLE)
        if not note.title:
            raise ValidationError('Note title is required')
        _check_window(note.publish_at, note.expires_at)
        note.updated_at = now_utc()
        return note

    @staticmethod
    @atomic
    def set_note_visibility(session, note_id, is_published, is_visible_to_students):
        note = ContentService.get_note(session, note_id)
        note.is_published = bool(is_published)
        note.is_visible_to_students = bool(is_visible_to_students)
        note.updated_at = now_utc()
        return note

    @staticmethod
    @atomic
    def delete_note(session, note_id):
        """Delete a note and all of its views"""
        note = ContentService.get_note(session, note_id)
        deleted = session.query(NoteView).filter_by(note_id=note_id).delete()
        AnalyticsService.drop_content(session, 'note', note_id)
        session.delete(note)
        logger.info("Deleted note %s and %s views", note_id, deleted)

    @staticmethod
    @atomic
    def record_note_view(session, note_id, user_id, duration=None):
        note = ContentService.get_note(session, note_id)
        UserService.get_user(session, user_id)
        if duration is not None and duration < 0:
            raise ValidationError('Duration cannot be negative')

        seen_before = session.query(NoteView.id).filter_by(
            note_id=note_id,
            user_id=user_id
        ).first() is not None

        now = now_utc()
        view = NoteView(note_id=note_id, user_id=user_id, viewed_at=now, duration=duration)
        session.add(view)

        AnalyticsService.on_note_viewed(session, user_id, duration=duration, at=now)
        AnalyticsService.record_content_view(
            session, 'note', note.id, note.course_id, is_unique=not seen_before
        )
        session.flush()
        return view

    # ================= RESOURCES =================

    @staticmethod
    def get_resource(session, resource_id):
        resource = session.get(Resource, resource_id)
        if not resource:
            raise NotFoundError('Resource', resource_id)
        return resource

    @staticmethod
    def list_resources(session, course_id, include_unpublished=False, category=None):
        query = session.query(Resource).filter_by(course_id=course_id)
        if category:
            query = query.filter_by(category=category)
        resources = query.order_by(Resource.order, Resource.id).all()
        if include_unpublished:
            return resources
        now = now_utc()
        return [r for r in resources if r.is_available(now)]

    @staticmethod
    def list_resource_categories(session, course_id):
        rows = session.query(Resource.category).filter(
            Resource.course_id == course_id,
            Resource.category.isnot(None)
        ).distinct().all()
        return sorted(row.category for row in rows)

    @staticmethod
    def _validate_resource(resource_type, file_ref, url):
        if resource_type not in RESOURCE_TYPES:
            raise ValidationError(f"Invalid resource type '{resource_type}'")
        if resource_type == 'file' and not file_ref:
            raise ValidationError('File resources need a file reference')
        if resource_type in ('link', 'video') and not url:
            raise ValidationError(f'{resource_type.capitalize()} resources need a URL')

    @staticmethod
    @atomic
    def create_resource(session, course_id, title, type, created_by, description=None,
                        file_ref=None, url=None, category=None, order=0,
                        available_from=None, expires_at=None):
        CourseService.get_course(session, course_id)
        UserService.get_user(session, created_by)
        if not title:
            raise ValidationError('Resource title is required')
        ContentService._validate_resource(type, file_ref, url)
        _check_window(available_from, expires_at)

        now = now_utc()
        resource = Resource(
            course_id=course_id,
            title=title,
            description=description,
            type=type,
            file_ref=file_ref,
            url=url,
            category=category,
            order=order,
            is_published=False,
            is_visible_to_students=False,
            available_from=available_from,
            expires_at=expires_at,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        session.add(resource)
        session.flush()
        return resource

    @staticmethod
    @atomic
    def update_resource(session, resource_id, **fields):
        resource = ContentService.get_resource(session, resource_id)
        apply_updates(resource, fields, RESOURCE_FIELDS, clearable=RESOURCE_CLEARABLE)
        if not resource.title:
            raise ValidationError('Resource title is required')
        ContentService._validate_resource(resource.type, resource.file_ref, resource.url)
        _check_window(resource.available_from, resource.expires_at)
        resource.updated_at = now_utc()
        return resource

    @staticmethod
    @atomic
    def set_resource_visibility(session, resource_id, is_published, is_visible_to_students):
        resource = ContentService.get_resource(session, resource_id)
        resource.is_published = bool(is_published)
        resource.is_visible_to_students = bool(is_visible_to_students)
        resource.updated_at = now_utc()
        return resource

    @staticmethod
    @atomic
    def delete_resource(session, resource_id):
        """Delete a resource and its access log (the stored file is external)"""
        resource = ContentService.get_resource(session, resource_id)
        session.query(ResourceAccess).filter_by(resource_id=resource_id).delete()
        AnalyticsService.drop_content(session, 'resource', resource_id)
        session.delete(resource)

    @staticmethod
    @atomic
    def record_resource_access(session, resource_id, user_id, action='view'):
        resource = ContentService.get_resource(session, resource_id)
        UserService.get_user(session, user_id)
        if action not in ACCESS_ACTIONS:
            raise ValidationError(f"Invalid access action '{action}'")

        seen_before = session.query(ResourceAccess.id).filter_by(
            resource_id=resource_id,
            user_id=user_id
        ).first() is not None

        access = ResourceAccess(
            resource_id=resource_id,
            user_id=user_id,
            accessed_at=now_utc(),
            action=action,
        )
        session.add(access)
        AnalyticsService.record_content_view(
            session, 'resource', resource.id, resource.course_id, is_unique=not seen_before
        )
        session.flush()
        return access
