"""
Health Check and Monitoring Endpoints
Provides endpoints for application health monitoring and readiness checks.
"""
from flask import Blueprint, jsonify, current_app
from datetime import datetime
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import sys
import psutil
import os

from maintplan.extensions import db

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('/ping', methods=['GET'])
def ping():
    """
    Simple ping endpoint for basic connectivity checks.
    Returns: 200 OK with pong message
    """
    return jsonify({
        'status': 'ok',
        'message': 'pong',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/live', methods=['GET'])
def liveness():
    """Liveness probe - the process is up and answering"""
    return jsonify({
        'status': 'alive',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness():
    """
    Readiness probe - checks the database answers within the storage bound.

    Returns:
        200: Application is ready
        503: Database is unreachable
    """
    checks = {'database': False}
    errors = []

    try:
        db.session.execute(text('SELECT 1'))
        checks['database'] = True
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning(f"Readiness check failed: {e}")
        errors.append(f"Database: {str(e)}")

    all_checks_passed = all(checks.values())
    response = {
        'status': 'ready' if all_checks_passed else 'not_ready',
        'checks': checks,
        'timestamp': datetime.utcnow().isoformat()
    }
    if errors:
        response['errors'] = errors

    return jsonify(response), 200 if all_checks_passed else 503


@health_bp.route('/status', methods=['GET'])
def status():
    """
    Detailed application status and metrics.
    Provides information about process resources and configuration.
    """
    process = psutil.Process()
    memory_info = process.memory_info()
    disk_usage = psutil.disk_usage('/')
    database_uri = current_app.config.get('SQLALCHEMY_DATABASE_URI', '')

    return jsonify({
        'status': 'operational',
        'timestamp': datetime.utcnow().isoformat(),
        'application': {
            'name': 'maintplan',
            'environment': current_app.config.get('ENV_NAME', 'unknown'),
            'debug': current_app.debug,
        },
        'system': {
            'python_version': sys.version,
            'platform': sys.platform,
            'process_id': os.getpid(),
        },
        'resources': {
            'memory': {
                'used_mb': round(memory_info.rss / 1024 / 1024, 2),
                'percent': round(process.memory_percent(), 2),
            },
            'cpu': {
                'percent': round(process.cpu_percent(interval=0.1), 2),
            },
            'disk': {
                'total_gb': round(disk_usage.total / 1024 / 1024 / 1024, 2),
                'free_gb': round(disk_usage.free / 1024 / 1024 / 1024, 2),
                'percent': disk_usage.percent,
            }
        },
        'database': {
            'type': database_uri.split(':', 1)[0] or 'unknown',
            'storage_timeout_seconds': current_app.config.get('STORAGE_TIMEOUT_SECONDS'),
        },
        'scheduling_defaults': {
            'buffer_minutes': current_app.config.get('SCHEDULE_DEFAULT_BUFFER_MINUTES'),
            'group_by_machine': current_app.config.get('SCHEDULE_DEFAULT_GROUP_BY_MACHINE'),
            'prioritize_mandatory': current_app.config.get('SCHEDULE_DEFAULT_PRIORITIZE_MANDATORY'),
            'prefer_person_in_charge': current_app.config.get('SCHEDULE_DEFAULT_PREFER_PERSON_IN_CHARGE'),
            'task_minutes': current_app.config.get('SCHEDULE_DEFAULT_TASK_MINUTES'),
        },
    }), 200
