"""
Shift roster API (read-only)
"""
from flask import Blueprint, jsonify, request

from maintplan.error_handlers import handle_errors
from maintplan.models import get_db, get_models
from maintplan.services.roster_resolver import RosterResolver
from maintplan.utils.db_helpers import storage_guard
from maintplan.utils.validators import validate_date_param

shifts_bp = Blueprint('shifts', __name__, url_prefix='/api/shifts')


@shifts_bp.route('', methods=['GET'])
@handle_errors
def list_shifts():
    """Active shifts ordered by start time"""
    Shift = get_models()['Shift']
    db = get_db()
    with storage_guard('list shifts', db.session):
        shifts = db.session.query(Shift).filter_by(is_active=True).order_by(Shift.start_time, Shift.id).all()
    return jsonify([shift.to_dict() for shift in shifts])


@shifts_bp.route('/roster', methods=['GET'])
@handle_errors
def roster():
    """
    Effective shift of every active operator on a date

    Query params:
        date: Date to resolve (YYYY-MM-DD, required)
    """
    target_date = validate_date_param(request.args.get('date'), 'date')
    models = get_models()
    db = get_db()

    entries = RosterResolver(db.session, models).resolve_entries(target_date)

    Shift = models['Shift']
    with storage_guard('load shift names', db.session):
        shift_names = {shift.id: shift.name for shift in db.session.query(Shift).all()}

    return jsonify({
        'date': target_date.isoformat(),
        'operators': [entry.to_dict(shift_names) for entry in entries],
    })
