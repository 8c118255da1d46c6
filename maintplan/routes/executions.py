"""
Maintenance execution API
Records, corrects and undoes the completion state of scheduled tasks
"""
from flask import Blueprint, current_app, jsonify, request

from maintplan.error_handlers import handle_errors
from maintplan.error_handlers.exceptions import ValidationException
from maintplan.models import get_db, get_models
from maintplan.services.execution_overlay import ExecutionOverlay
from maintplan.services.schedule_types import ExecutionStatus
from maintplan.utils.validators import parse_id, validate_date_param, validate_required_fields

executions_bp = Blueprint('executions', __name__, url_prefix='/api/executions')

# JSON body keys -> writable execution fields
BODY_FIELDS = {
    'status': 'status',
    'actualTime': 'actual_time',
    'completedById': 'completed_by_id',
    'notes': 'notes',
}


def get_overlay():
    return ExecutionOverlay(get_db().session, get_models())


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationException('Request body must be a JSON object')
    return data


@executions_bp.route('', methods=['GET'])
@handle_errors
def list_executions():
    """
    Execution records in a date range

    Query params:
        from: First scheduled date (YYYY-MM-DD, required)
        to: Last scheduled date (YYYY-MM-DD, defaults to from)
    """
    range_start = validate_date_param(request.args.get('from'), 'from')
    range_end = validate_date_param(request.args.get('to'), 'to') if request.args.get('to') else range_start
    records = get_overlay().list_executions(range_start, range_end)
    return jsonify([record.to_dict() for record in records])


@executions_bp.route('/stats', methods=['GET'])
@handle_errors
def execution_stats():
    """
    Per-action completion statistics for the current year

    Query params:
        machineId: Restrict to one machine
        asOf: Last day counted (YYYY-MM-DD, defaults to today)
    """
    machine_id = request.args.get('machineId')
    machine_id = parse_id(machine_id, 'machineId') if machine_id else None
    as_of = request.args.get('asOf')
    stats = get_overlay().execution_stats(machine_id=machine_id, as_of=as_of or None)
    return jsonify(stats)


@executions_bp.route('', methods=['PUT'])
@handle_errors
def upsert_execution():
    """
    Create or overwrite the execution for (actionId, machineId, scheduledDate)

    Request body:
        actionId, machineId, scheduledDate: Execution key (required)
        status: PENDING, COMPLETED or SKIPPED (default COMPLETED)
        actualTime: Minutes actually spent
        completedById: Operator who did the work
        notes: Free text, at most 1000 characters

    Returns:
        201 when created, 200 when an existing record was overwritten
    """
    data = get_json_body()
    validate_required_fields(data, ['actionId', 'machineId', 'scheduledDate'])

    record, created = get_overlay().upsert_execution(
        action_id=data['actionId'],
        machine_id=data['machineId'],
        scheduled_date=data['scheduledDate'],
        status=data.get('status') or ExecutionStatus.COMPLETED,
        actual_time=data.get('actualTime'),
        completed_by_id=data.get('completedById'),
        notes=data.get('notes'),
    )
    return jsonify(record.to_dict()), 201 if created else 200


@executions_bp.route('/<execution_id>', methods=['PATCH'])
@handle_errors
def update_execution(execution_id):
    """Apply the given fields (status, actualTime, completedById, notes)"""
    data = get_json_body()
    unknown = sorted(set(data) - set(BODY_FIELDS))
    if unknown:
        raise ValidationException(f"Unknown fields: {', '.join(unknown)}")

    fields = {BODY_FIELDS[key]: value for key, value in data.items()}
    record = get_overlay().update_execution(execution_id, fields)
    return jsonify(record.to_dict())


@executions_bp.route('/<execution_id>', methods=['DELETE'])
@handle_errors
def delete_execution(execution_id):
    """Undo an execution; deleting an id that no longer exists still succeeds"""
    deleted = get_overlay().delete_execution(execution_id)
    if not deleted:
        current_app.logger.info(f"Delete of execution {execution_id} found nothing to remove")
    return jsonify({'success': True, 'deleted': deleted})
