"""
Helper Functions
Utility functions used across the application
"""
from datetime import datetime, timezone
from functools import wraps
import logging
import re

from flask import current_app, has_app_context, request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
import pytz

from learnhub.errors import ConcurrencyConflict, ValidationError

logger = logging.getLogger(__name__)


def now_utc():
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def as_utc(dt):
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=pytz.utc)
    return dt.astimezone(pytz.utc)


def app_timezone():
    """Timezone used for calendar-day logic"""
    name = "UTC"
    if has_app_context():
        name = current_app.config.get("TIMEZONE", "UTC")
    return pytz.timezone(name)


def local_date(dt, tz=None):
    """Calendar date of a timestamp in the configured timezone"""
    tz = tz or app_timezone()
    return as_utc(dt).astimezone(tz).date()


def isoformat(dt):
    return as_utc(dt).isoformat() if dt else None


def parse_datetime(value, field="datetime"):
    """
    Accept ISO-8601 strings or epoch milliseconds from JSON payloads.
    Returns an aware UTC datetime, or None for empty input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a timestamp")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{field} is not a valid ISO-8601 timestamp")
    return as_utc(parsed)


def atomic(f):
    """
    Run a service operation as one unit of work.
    The wrapped function takes the session as its first argument; it is
    committed once on success and rolled back on any error.
    """
    @wraps(f)
    def decorated_function(session, *args, **kwargs):
        try:
            result = f(session, *args, **kwargs)
            session.commit()
        except (IntegrityError, StaleDataError) as exc:
            session.rollback()
            logger.warning("Concurrent write in %s: %s", f.__name__, exc)
            raise ConcurrencyConflict() from exc
        except Exception:
            session.rollback()
            raise
        return result
    return decorated_function


def apply_updates(record, fields, allowed, clearable=()):
    """
    Copy update fields onto a record.
    A None value clears the field, which only the clearable ones allow.
    """
    for name, value in fields.items():
        if name not in allowed:
            raise ValidationError(f"Field '{name}' cannot be updated")
        if value is None and name not in clearable:
            raise ValidationError(f"Field '{name}' cannot be cleared")
        setattr(record, name, value)


def _snake_case(name):
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def present_fields(data, keys, timestamps=()):
    """
    Keyword arguments for a partial update: only the camelCase keys the
    payload actually carries, so an explicit null differs from an absent key
    """
    fields = {}
    for key in keys:
        if key not in data:
            continue
        value = data[key]
        if key in timestamps:
            value = parse_datetime(value, key)
        fields[_snake_case(key)] = value
    return fields


def get_json_body():
    """Get request JSON as dict, rejecting anything else"""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_fields(data, *fields):
    """Raise ValidationError if any field is missing from payload"""
    missing = [f for f in fields if data.get(f) is None]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    return [data[f] for f in fields]
