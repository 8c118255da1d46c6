"""
Error handling decorators for the scheduler API blueprints
"""
from functools import wraps
from datetime import datetime

from flask import jsonify, current_app

from maintplan.extensions import db
from .exceptions import AppException
from .logging import _error_response


def _retry_after_seconds() -> int:
    # A retry is only useful once the storage wait bound has passed
    return max(1, int(current_app.config.get('STORAGE_TIMEOUT_SECONDS', 5)))


def handle_errors(f):
    """
    Turn raised exceptions into JSON error responses

    AppException subclasses keep their status code and payload. Retryable
    ones (conflicts, storage timeouts) also carry a Retry-After header.
    Anything else is logged with an error id, the session is rolled back
    and a generic 500 is returned.

    Usage:
        @schedule_bp.route('/daily')
        @handle_errors
        def daily_schedule():
            ...
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)

        except AppException as e:
            log = current_app.logger.warning if e.status_code >= 500 else current_app.logger.info
            log(
                f"{e.error_type} in {f.__name__}: {e.message}",
                extra={'details': e.details} if e.details else {}
            )
            response = jsonify(e.to_dict())
            if e.retryable:
                response.headers['Retry-After'] = str(_retry_after_seconds())
            return response, e.status_code

        except Exception as e:
            error_id = datetime.utcnow().strftime('%Y%m%d_%H%M%S_%f')
            db.session.rollback()
            current_app.logger.error(
                f"Unexpected error [{error_id}] in {f.__name__}: {str(e)}",
                exc_info=True
            )
            return _error_response('InternalError', 'An unexpected error occurred', 500, error_id)

    return decorated
