"""Tests for notes, resources and their view tracking."""

from datetime import timedelta

import pytest

from learnhub.errors import NotFoundError, ValidationError
from learnhub.models import ContentAnalytics, StudentStats
from learnhub.services import ContentService
from learnhub.utils import now_utc


@pytest.fixture
def note(session, course, tutor):
    note = ContentService.create_note(session, course.id, "Week 1", "# Hello", tutor.id)
    return ContentService.set_note_visibility(session, note.id, True, True)


def _analytics(session, content_type, content_id):
    return session.query(ContentAnalytics).filter_by(
        content_type=content_type, content_id=content_id
    ).one()


class TestNotes:
    def test_new_notes_are_hidden(self, session, course, tutor):
        draft = ContentService.create_note(session, course.id, "Draft", "", tutor.id)
        assert ContentService.list_notes(session, course.id) == []
        assert [n.id for n in ContentService.list_notes(session, course.id, include_unpublished=True)] == [draft.id]

    def test_schedule_window(self, session, course, tutor, note):
        later = ContentService.create_note(
            session, course.id, "Later", "", tutor.id,
            publish_at=now_utc() + timedelta(days=1),
        )
        ContentService.set_note_visibility(session, later.id, True, True)
        assert [n.id for n in ContentService.list_notes(session, course.id)] == [note.id]

    def test_expiry_must_follow_publish(self, session, course, tutor):
        now = now_utc()
        with pytest.raises(ValidationError):
            ContentService.create_note(
                session, course.id, "Bad", "", tutor.id,
                publish_at=now, expires_at=now - timedelta(minutes=1),
            )

    def test_update(self, session, note):
        updated = ContentService.update_note(session, note.id, title="Week one")
        assert updated.title == "Week one"
        assert updated.content == "# Hello"

    def test_update_clears_schedule(self, session, note):
        ContentService.update_note(session, note.id, expires_at=now_utc() + timedelta(days=7))
        updated = ContentService.update_note(session, note.id, expires_at=None)
        assert updated.expires_at is None
        with pytest.raises(ValidationError):
            ContentService.update_note(session, note.id, title=None)

    def test_unknown_author(self, session, course):
        with pytest.raises(NotFoundError):
            ContentService.create_note(session, course.id, "Week 2", "", 999)

    def test_views_feed_analytics(self, session, note, student, make_user):
        ContentService.record_note_view(session, note.id, student.id, duration=120)
        ContentService.record_note_view(session, note.id, student.id, duration=30)
        ContentService.record_note_view(session, note.id, make_user().id)

        row = _analytics(session, "note", note.id)
        assert row.total_views == 3
        assert row.unique_viewers == 2

        stats = session.query(StudentStats).filter_by(user_id=student.id).one()
        assert stats.total_notes_viewed == 2
        assert stats.total_time_spent == 150

    def test_negative_duration_rejected(self, session, note, student):
        with pytest.raises(ValidationError):
            ContentService.record_note_view(session, note.id, student.id, duration=-5)

    def test_tutor_views_count_for_content_only(self, session, note, tutor):
        ContentService.record_note_view(session, note.id, tutor.id)
        assert _analytics(session, "note", note.id).total_views == 1

    def test_delete(self, session, note, student):
        ContentService.record_note_view(session, note.id, student.id)
        ContentService.delete_note(session, note.id)
        with pytest.raises(NotFoundError):
            ContentService.get_note(session, note.id)
        assert session.query(ContentAnalytics).filter_by(content_type="note").count() == 0


class TestResources:
    def test_type_specific_fields(self, session, course, tutor):
        with pytest.raises(ValidationError):
            ContentService.create_resource(session, course.id, "Slides", "file", tutor.id)
        with pytest.raises(ValidationError):
            ContentService.create_resource(session, course.id, "Talk", "video", tutor.id)
        with pytest.raises(ValidationError):
            ContentService.create_resource(session, course.id, "Thing", "podcast", tutor.id, url="x")

    def test_listing_and_categories(self, session, course, tutor):
        slides = ContentService.create_resource(
            session, course.id, "Slides", "file", tutor.id,
            file_ref="files/week1.pdf", category="Lecture Slides",
        )
        link = ContentService.create_resource(
            session, course.id, "Docs", "link", tutor.id,
            url="https://docs.python.org", category="Reading",
        )
        ContentService.set_resource_visibility(session, slides.id, True, True)

        assert [r.id for r in ContentService.list_resources(session, course.id)] == [slides.id]
        reading = ContentService.list_resources(session, course.id, include_unpublished=True, category="Reading")
        assert [r.id for r in reading] == [link.id]
        assert ContentService.list_resource_categories(session, course.id) == ["Lecture Slides", "Reading"]

    def test_access_log(self, session, course, tutor, student):
        resource = ContentService.create_resource(
            session, course.id, "Docs", "link", tutor.id, url="https://docs.python.org"
        )
        ContentService.record_resource_access(session, resource.id, student.id)
        ContentService.record_resource_access(session, resource.id, student.id, action="download")
        with pytest.raises(ValidationError):
            ContentService.record_resource_access(session, resource.id, student.id, action="print")

        row = _analytics(session, "resource", resource.id)
        assert row.total_views == 2
        assert row.unique_viewers == 1

    def test_update_revalidates(self, session, course, tutor):
        resource = ContentService.create_resource(
            session, course.id, "Docs", "link", tutor.id, url="https://docs.python.org"
        )
        with pytest.raises(ValidationError):
            ContentService.update_resource(session, resource.id, type="file")
        ContentService.delete_resource(session, resource.id)
        with pytest.raises(NotFoundError):
            ContentService.get_resource(session, resource.id)

    def test_update_clears_optional_fields(self, session, course, tutor):
        resource = ContentService.create_resource(
            session, course.id, "Docs", "link", tutor.id,
            url="https://docs.python.org", category="Reading",
        )
        updated = ContentService.update_resource(session, resource.id, category=None)
        assert updated.category is None
        with pytest.raises(ValidationError):
            ContentService.update_resource(session, resource.id, type=None)

    def test_unknown_author(self, session, course):
        with pytest.raises(NotFoundError):
            ContentService.create_resource(
                session, course.id, "Docs", "link", 999, url="https://docs.python.org"
            )

    def test_delete_drops_analytics(self, session, course, tutor, student):
        resource = ContentService.create_resource(
            session, course.id, "Docs", "link", tutor.id, url="https://docs.python.org"
        )
        ContentService.record_resource_access(session, resource.id, student.id)
        ContentService.delete_resource(session, resource.id)
        assert session.query(ContentAnalytics).filter_by(content_type="resource").count() == 0
