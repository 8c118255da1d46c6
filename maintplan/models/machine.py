"""
Machine catalog and the recurring maintenance actions attached to each machine
"""


def create_machine_models(db):
    """Factory function to create Machine and MaintenanceAction models with db instance"""

    class Machine(db.Model):
        """
        Machine master record (owned by the CRUD layer)

        Attributes:
            final_code: Plant code printed on the machine label
            area: Production area
            authorization_group: Operators need a grant for this group, NULL = anyone
            maintenance_needed: Machines not needing maintenance are never scheduled
            maintenance_on_hold: Temporarily excluded from scheduling
            person_in_charge_id: Operator preferred for in-charge actions
        """
        __tablename__ = 'machines'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        final_code = db.Column(db.String(50), nullable=False)
        description = db.Column(db.String(200))
        area = db.Column(db.String(50))
        authorization_group = db.Column(db.String(50), nullable=True)
        maintenance_needed = db.Column(db.Boolean, nullable=False, default=True)
        maintenance_on_hold = db.Column(db.Boolean, nullable=False, default=False)
        person_in_charge_id = db.Column(db.Integer, db.ForeignKey('operators.id'), nullable=True)

        __table_args__ = (
            db.Index('idx_machines_final_code', 'final_code'),
        )

        def __repr__(self):
            return f'<Machine {self.id}: {self.final_code}>'

    class MaintenanceAction(db.Model):
        """
        Recurring maintenance action on a machine

        Attributes:
            action: Instruction text
            periodicity: BEFORE_EACH_USE, WEEKLY, MONTHLY, QUARTERLY or YEARLY
            priority: MANDATORY or IDEAL
            time_needed: Estimated minutes, NULL falls back to the configured default
            month: Month name for YEARLY actions (JANUARY when NULL)
            anchor_date: First occurrence of a WEEKLY action, NULL = 1 January
            maintenance_in_charge: Prefer the machine's person in charge
        """
        __tablename__ = 'maintenance_actions'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        machine_id = db.Column(db.Integer, db.ForeignKey('machines.id'), nullable=False)
        action = db.Column(db.String(500), nullable=False)
        periodicity = db.Column(db.String(30), nullable=False)
        priority = db.Column(db.String(20), nullable=False, default='IDEAL')
        time_needed = db.Column(db.Integer, nullable=True)
        month = db.Column(db.String(20), nullable=True)
        anchor_date = db.Column(db.Date, nullable=True)
        maintenance_in_charge = db.Column(db.Boolean, nullable=False, default=False)

        __table_args__ = (
            db.Index('idx_actions_machine', 'machine_id'),
            db.CheckConstraint('time_needed IS NULL OR time_needed >= 0', name='check_action_time_needed'),
        )

        machine = db.relationship('Machine', backref='actions', lazy=True)

        def __repr__(self):
            return f'<MaintenanceAction {self.id} on machine {self.machine_id}: {self.periodicity}>'

    return Machine, MaintenanceAction
