"""
Shift catalog and per-date shift overrides
Shifts are configured by an administrator and read-only to the scheduler
"""
from datetime import datetime


def create_shift_models(db):
    """Factory function to create Shift and OperatorShiftOverride models with db instance"""

    class Shift(db.Model):
        """
        Work shift definition

        Attributes:
            id: Shift identifier
            name: Display name (e.g. "Morning")
            start_time: Clock-of-day start
            end_time: Clock-of-day end, must be after start_time
            break_minutes: Paid break taken inside the shift, NULL when not encoded
            is_active: Inactive shifts are hidden from the shift list but still resolve for operators assigned to them
        """
        __tablename__ = 'shifts'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        name = db.Column(db.String(100), nullable=False)
        start_time = db.Column(db.Time, nullable=False)
        end_time = db.Column(db.Time, nullable=False)
        break_minutes = db.Column(db.Integer, nullable=True)
        is_active = db.Column(db.Boolean, nullable=False, default=True)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.Index('idx_shifts_active', 'is_active'),
        )

        def to_dict(self):
            return {
                'shiftId': str(self.id),
                'shiftName': self.name,
                'startTime': self.start_time.strftime('%H:%M') if self.start_time else None,
                'endTime': self.end_time.strftime('%H:%M') if self.end_time else None,
                'breakMinutes': self.break_minutes,
            }

        def __repr__(self):
            return f'<Shift {self.id}: {self.name}>'

    class OperatorShiftOverride(db.Model):
        """
        Date-specific shift for one operator

        Takes precedence over the operator's default shift on shift_date.
        A NULL shift_id is an explicit day off. Deleting the row reverts
        the operator to the default shift.
        """
        __tablename__ = 'operator_shift_overrides'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        operator_id = db.Column(db.Integer, db.ForeignKey('operators.id'), nullable=False)
        shift_date = db.Column(db.Date, nullable=False)
        shift_id = db.Column(db.Integer, db.ForeignKey('shifts.id'), nullable=True)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('operator_id', 'shift_date', name='unique_operator_shift_date'),
            db.Index('idx_shift_overrides_date', 'shift_date'),
        )

        shift = db.relationship('Shift', lazy=True)

        @property
        def is_day_off(self):
            return self.shift_id is None

        def __repr__(self):
            target = self.shift_id if self.shift_id is not None else 'day off'
            return f'<OperatorShiftOverride {self.operator_id} on {self.shift_date}: {target}>'

    return Shift, OperatorShiftOverride
