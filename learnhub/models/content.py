"""
Course Content Models
Markdown notes, downloadable resources and their view/access logs
"""
from learnhub.extensions import db
from learnhub.utils.helpers import now_utc, as_utc, isoformat

RESOURCE_TYPES = ('file', 'link', 'video', 'document')
ACCESS_ACTIONS = ('view', 'download')


def _within_window(opens_at, closes_at, at):
    if opens_at and as_utc(opens_at) > at:
        return False
    if closes_at and as_utc(closes_at) <= at:
        return False
    return True


class Note(db.Model):
    """Note model (markdown content)"""
    __tablename__ = 'note'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False, default='')
    order = db.Column(db.Integer, default=0)

    is_published = db.Column(db.Boolean, nullable=False, default=False)
    is_visible_to_students = db.Column(db.Boolean, nullable=False, default=False)

    # Scheduling - NULL means no restriction
    publish_at = db.Column(db.DateTime(timezone=True))
    expires_at = db.Column(db.DateTime(timezone=True))

    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    def __repr__(self):
        return f'<Note {self.id}: {self.title[:50]}>'

    def is_available(self, at=None):
        """Visible to students right now"""
        if not (self.is_published and self.is_visible_to_students):
            return False
        return _within_window(self.publish_at, self.expires_at, at or now_utc())

    def to_dict(self):
        return {
            'id': self.id,
            'courseId': self.course_id,
            'title': self.title,
            'content': self.content,
            'order': self.order,
            'isPublished': self.is_published,
            'isVisibleToStudents': self.is_visible_to_students,
            'publishAt': isoformat(self.publish_at),
            'expiresAt': isoformat(self.expires_at),
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class NoteView(db.Model):
    """One note view by one user"""
    __tablename__ = 'note_view'

    id = db.Column(db.Integer, primary_key=True)
    note_id = db.Column(db.Integer, db.ForeignKey('note.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    viewed_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    duration = db.Column(db.Integer)  # seconds

    __table_args__ = (
        db.Index('ix_note_view_note_user', 'note_id', 'user_id'),
    )


class Resource(db.Model):
    """Course resource (file, link, video, document)"""
    __tablename__ = 'resource'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    type = db.Column(db.String(20), nullable=False)

    file_ref = db.Column(db.String(255))  # storage is external
    url = db.Column(db.Text)

    category = db.Column(db.String(100), index=True)  # e.g. "Lecture Slides"
    order = db.Column(db.Integer, default=0)

    is_published = db.Column(db.Boolean, nullable=False, default=False)
    is_visible_to_students = db.Column(db.Boolean, nullable=False, default=False)

    available_from = db.Column(db.DateTime(timezone=True))
    expires_at = db.Column(db.DateTime(timezone=True))

    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    def __repr__(self):
        return f'<Resource {self.id}: {self.title[:50]}>'

    def is_available(self, at=None):
        if not (self.is_published and self.is_visible_to_students):
            return False
        return _within_window(self.available_from, self.expires_at, at or now_utc())

    def to_dict(self):
        return {
            'id': self.id,
            'courseId': self.course_id,
            'title': self.title,
            'description': self.description,
            'type': self.type,
            'fileRef': self.file_ref,
            'url': self.url,
            'category': self.category,
            'order': self.order,
            'isPublished': self.is_published,
            'isVisibleToStudents': self.is_visible_to_students,
            'availableFrom': isoformat(self.available_from),
            'expiresAt': isoformat(self.expires_at),
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
        }


class ResourceAccess(db.Model):
    """Resource view/download log"""
    __tablename__ = 'resource_access'

    id = db.Column(db.Integer, primary_key=True)
    resource_id = db.Column(db.Integer, db.ForeignKey('resource.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    accessed_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    action = db.Column(db.String(20), nullable=False)
