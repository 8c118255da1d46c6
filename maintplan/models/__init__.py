"""
Database models for the maintenance scheduler
Centralizes all SQLAlchemy model imports using factory pattern
"""
from .shift import create_shift_models
from .operator import create_operator_models
from .machine import create_machine_models
from .execution import create_execution_model

# Models are declared once per SQLAlchemy instance; a second create_app()
# in the same process reuses the classes instead of redefining tables.
_initialized = {}


def init_models(db):
    """
    Initialize all models with the database instance

    Args:
        db: SQLAlchemy database instance

    Returns:
        dict: Dictionary containing all model classes
    """
    if id(db) in _initialized:
        return _initialized[id(db)]

    Shift, OperatorShiftOverride = create_shift_models(db)
    Operator, OperatorAuthorization = create_operator_models(db)
    Machine, MaintenanceAction = create_machine_models(db)
    MaintenanceExecution = create_execution_model(db)

    models = {
        'Shift': Shift,
        'OperatorShiftOverride': OperatorShiftOverride,
        'Operator': Operator,
        'OperatorAuthorization': OperatorAuthorization,
        'Machine': Machine,
        'MaintenanceAction': MaintenanceAction,
        'MaintenanceExecution': MaintenanceExecution,
    }
    _initialized[id(db)] = models
    return models


__all__ = [
    'init_models',
    'create_shift_models',
    'create_operator_models',
    'create_machine_models',
    'create_execution_model',
    # Model registry exports
    'model_registry',
    'get_models',
    'get_db'
]

# Import registry for convenience
from .registry import model_registry, get_models, get_db
