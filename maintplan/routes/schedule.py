"""
Daily schedule API
Builds the maintenance schedule for one date on demand
"""
from flask import Blueprint, current_app, jsonify, request

from maintplan.error_handlers import handle_errors
from maintplan.models import get_db, get_models
from maintplan.services.schedule_service import DailyScheduleService
from maintplan.utils.validators import parse_schedule_config, validate_date_param

schedule_bp = Blueprint('schedule', __name__, url_prefix='/api/schedule')


@schedule_bp.route('/daily', methods=['GET'])
@handle_errors
def daily_schedule():
    """
    Daily schedule for a date

    Query params:
        date: Date to schedule (YYYY-MM-DD, required)
        breakDuration: Break minutes overriding each shift's own break
        bufferMinutes (alias buffer): Minutes reserved per lane
        groupByMachine: Keep tasks of one machine with one operator
        prioritizeMandatory: Place MANDATORY tasks first
        preferPersonInCharge: Give in-charge actions to the machine's person in charge
    """
    target_date = validate_date_param(request.args.get('date'), 'date')
    config = parse_schedule_config(request.args, current_app.config)

    service = DailyScheduleService(
        get_db().session,
        get_models(),
        default_task_minutes=current_app.config.get('SCHEDULE_DEFAULT_TASK_MINUTES', 15),
    )
    schedule = service.build(target_date, config)
    return jsonify(schedule.to_dict())
