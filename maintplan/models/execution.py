"""
Maintenance execution model - completion state of one scheduled occurrence
"""
from datetime import datetime


def create_execution_model(db):
    """Factory function to create MaintenanceExecution model with db instance"""

    class MaintenanceExecution(db.Model):
        """
        Execution outcome for (action, machine, scheduled date)

        The only record the scheduler owns. Created on the first complete or
        skip action, overwritten on correction and deleted to undo. The
        unique constraint serializes concurrent writers on the same key.
        """
        __tablename__ = 'maintenance_executions'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        action_id = db.Column(db.Integer, db.ForeignKey('maintenance_actions.id'), nullable=False)
        machine_id = db.Column(db.Integer, db.ForeignKey('machines.id'), nullable=False)
        scheduled_date = db.Column(db.Date, nullable=False)
        status = db.Column(db.String(20), nullable=False, default='COMPLETED')
        actual_time = db.Column(db.Integer, nullable=True)
        completed_by_id = db.Column(db.Integer, db.ForeignKey('operators.id'), nullable=True)
        completed_date = db.Column(db.DateTime, nullable=True)
        notes = db.Column(db.String(1000), nullable=True)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint(
                'action_id', 'machine_id', 'scheduled_date',
                name='unique_execution_action_machine_date'
            ),
            db.Index('idx_executions_date', 'scheduled_date'),
            db.CheckConstraint('actual_time IS NULL OR actual_time >= 0', name='check_execution_actual_time'),
        )

        completed_by = db.relationship('Operator', foreign_keys=[completed_by_id], lazy=True)

        def to_dict(self):
            """Serialize for the API (camelCase keys)"""
            return {
                'id': str(self.id),
                'actionId': str(self.action_id),
                'machineId': str(self.machine_id),
                'scheduledDate': self.scheduled_date.isoformat(),
                'status': self.status,
                'actualTime': self.actual_time,
                'completedById': str(self.completed_by_id) if self.completed_by_id else None,
                'completedByName': self.completed_by.name if self.completed_by else None,
                'completedDate': self.completed_date.isoformat() if self.completed_date else None,
                'notes': self.notes,
                'createdDate': self.created_at.isoformat() if self.created_at else None,
                'updatedDate': self.updated_at.isoformat() if self.updated_at else None,
            }

        def __repr__(self):
            return (f'<MaintenanceExecution {self.id}: action {self.action_id} '
                    f'machine {self.machine_id} on {self.scheduled_date} {self.status}>')

    return MaintenanceExecution
