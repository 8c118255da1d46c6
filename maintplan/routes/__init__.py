"""
Routes package for the maintenance scheduler
Centralizes all route blueprints
"""
from .health import health_bp
from .schedule import schedule_bp
from .shifts import shifts_bp
from .executions import executions_bp

__all__ = [
    'health_bp',
    'schedule_bp',
    'shifts_bp',
    'executions_bp',
]
