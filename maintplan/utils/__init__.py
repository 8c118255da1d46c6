"""
Utility modules for the maintenance scheduler
"""
from .db_helpers import storage_guard
from .validators import validate_date_param, validate_required_fields

__all__ = ['storage_guard', 'validate_date_param', 'validate_required_fields']
