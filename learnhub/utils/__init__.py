"""
Utils Package
"""
from learnhub.utils.helpers import (
    now_utc,
    as_utc,
    app_timezone,
    local_date,
    isoformat,
    parse_datetime,
    atomic,
    apply_updates,
    present_fields,
    get_json_body,
    require_fields
)

__all__ = [
    'now_utc',
    'as_utc',
    'app_timezone',
    'local_date',
    'isoformat',
    'parse_datetime',
    'atomic',
    'apply_updates',
    'present_fields',
    'get_json_body',
    'require_fields'
]
