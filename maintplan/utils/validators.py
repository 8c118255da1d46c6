"""
Validation utilities for the maintenance scheduler API
Provides reusable parsing of query parameters and request bodies

All functions raise ValidationException so @handle_errors turns them into
a 400 InvalidInput response.
"""
import re
from datetime import datetime, date
from typing import Any, Dict, List, Mapping, Optional

from maintplan.error_handlers.exceptions import ValidationException


_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


def validate_date_param(date_str: Any, param_name: str = 'date') -> date:
    """
    Validate and parse date parameter from string.

    Args:
        date_str: Date string in YYYY-MM-DD format (date objects pass through)
        param_name: Name of parameter for error messages (default: 'date')

    Returns:
        date: Parsed date object

    Raises:
        ValidationException: If date is missing or the format is invalid

    Examples:
        >>> validate_date_param('2025-10-15')
        date(2025, 10, 15)
        >>> validate_date_param('invalid')
        ValidationException: Invalid date format. Use YYYY-MM-DD
    """
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str
    if not date_str:
        raise ValidationException(f"Missing required parameter: {param_name}")
    try:
        return datetime.strptime(str(date_str), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationException(
            f"Invalid {param_name} format. Use YYYY-MM-DD (e.g., 2025-10-15)",
            details={'field': param_name}
        )


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> None:
    """
    Validate that all required fields are present in request data.

    Args:
        data: Request data dictionary
        required_fields: List of required field names

    Raises:
        ValidationException: If any required field is missing
    """
    missing = [field for field in required_fields if data.get(field) in (None, '')]
    if missing:
        raise ValidationException(
            f"Missing required fields: {', '.join(missing)}",
            details={'fields': missing}
        )


def parse_non_negative_int(value: Any, param_name: str, default: Optional[int] = None) -> Optional[int]:
    """
    Parse an integer parameter that must be >= 0.

    Empty values return the default.
    """
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValidationException(f"{param_name} must be an integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationException(f"{param_name} must be an integer", details={'field': param_name})
    if isinstance(value, float) and value != parsed:
        raise ValidationException(f"{param_name} must be an integer", details={'field': param_name})
    if parsed < 0:
        raise ValidationException(f"{param_name} must be >= 0", details={'field': param_name})
    return parsed


def parse_id(value: Any, param_name: str) -> int:
    """Parse a positive record id (string ids from the JSON contract are accepted)"""
    parsed = parse_non_negative_int(value, param_name)
    if parsed is None or parsed == 0:
        raise ValidationException(f"{param_name} must be a positive integer id", details={'field': param_name})
    return parsed


def parse_bool(value: Any, param_name: str, default: bool) -> bool:
    """Parse a boolean flag given as true/false, 1/0, yes/no or on/off"""
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValidationException(f"{param_name} must be true or false", details={'field': param_name})


def parse_schedule_config(args: Mapping[str, Any], settings: Mapping[str, Any]):
    """
    Build a ScheduleConfig from request query parameters.

    Missing parameters fall back to the SCHEDULE_DEFAULT_* settings.
    'buffer' is accepted as an alias of 'bufferMinutes'.
    """
    from maintplan.services.schedule_types import ScheduleConfig

    buffer_value = args.get('bufferMinutes')
    if buffer_value in (None, ''):
        buffer_value = args.get('buffer')

    return ScheduleConfig(
        break_duration=parse_non_negative_int(args.get('breakDuration'), 'breakDuration'),
        buffer_minutes=parse_non_negative_int(
            buffer_value, 'bufferMinutes', settings.get('SCHEDULE_DEFAULT_BUFFER_MINUTES', 0)
        ),
        group_by_machine=parse_bool(
            args.get('groupByMachine'), 'groupByMachine',
            settings.get('SCHEDULE_DEFAULT_GROUP_BY_MACHINE', False)
        ),
        prioritize_mandatory=parse_bool(
            args.get('prioritizeMandatory'), 'prioritizeMandatory',
            settings.get('SCHEDULE_DEFAULT_PRIORITIZE_MANDATORY', True)
        ),
        prefer_person_in_charge=parse_bool(
            args.get('preferPersonInCharge'), 'preferPersonInCharge',
            settings.get('SCHEDULE_DEFAULT_PREFER_PERSON_IN_CHARGE', True)
        ),
    )


def sanitize_request_data(data: str) -> str:
    """
    Remove sensitive data from request strings for safe logging.

    Redacts common sensitive field patterns (passwords, tokens, API keys, secrets).

    Examples:
        >>> sanitize_request_data('{"password": "secret123"}')
        '{"password": "[REDACTED]"}'
    """
    for field in ('password', 'token', 'api_key', 'secret', 'credential'):
        data = re.sub(rf'("{field}"\s*:\s*")[^"]*(")', r'\1[REDACTED]\2', data, flags=re.IGNORECASE)
    return data
