"""
Operator model and authorization grants
Represents maintenance personnel who can be placed in a shift lane
"""
from datetime import datetime


def create_operator_models(db):
    """Factory function to create Operator and OperatorAuthorization models with db instance"""

    class Operator(db.Model):
        """
        Operator model representing schedulable maintenance personnel

        Attributes:
            id: Operator identifier
            name: Full name
            department: Department label shown on the schedule
            is_active: Only active operators are rostered
            default_shift_id: Shift worked when no override exists for a date
        """
        __tablename__ = 'operators'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        name = db.Column(db.String(100), nullable=False)
        department = db.Column(db.String(50), nullable=True)
        email = db.Column(db.String(120), unique=True)
        is_active = db.Column(db.Boolean, nullable=False, default=True)
        default_shift_id = db.Column(db.Integer, db.ForeignKey('shifts.id'), nullable=True)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.Index('idx_operators_active', 'is_active'),
        )

        default_shift = db.relationship('Shift', lazy=True)
        authorizations = db.relationship(
            'OperatorAuthorization', backref='operator', lazy=True,
            cascade='all, delete-orphan'
        )

        def __repr__(self):
            return f'<Operator {self.id}: {self.name}>'

    class OperatorAuthorization(db.Model):
        """
        Grant allowing an operator to maintain machines of one authorization group

        Managed by the administrative layer; the scheduler only reads it.
        """
        __tablename__ = 'operator_authorizations'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        operator_id = db.Column(db.Integer, db.ForeignKey('operators.id'), nullable=False)
        authorization_group = db.Column(db.String(50), nullable=False)
        granted_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('operator_id', 'authorization_group', name='unique_operator_authorization'),
        )

        def __repr__(self):
            return f'<OperatorAuthorization {self.operator_id}: {self.authorization_group}>'

    return Operator, OperatorAuthorization
