"""
Model Registry - centralized model access using the Flask extension pattern

Services receive the model dictionary explicitly; routes look it up
through get_models() instead of reaching into app.config.

Usage:
    from maintplan.models import get_models

    def roster_view():
        models = get_models()
        operators = models['Operator'].query.filter_by(is_active=True).all()
"""
from flask import current_app
from typing import Dict, Any


class ModelRegistry:
    """
    Flask extension holding the model classes built by init_models()
    """

    def __init__(self, app=None):
        self.models: Dict[str, Any] = {}
        if app:
            self.init_app(app)

    def init_app(self, app):
        """
        Initialize extension with Flask app

        Args:
            app: Flask application instance
        """
        app.extensions['models'] = self

    def register(self, models_dict: Dict[str, Any]):
        """
        Register all models with the registry

        Args:
            models_dict: Dictionary mapping model names to model classes
        """
        self.models = dict(models_dict)

    def __getitem__(self, model_name: str) -> Any:
        """
        Dict-like access to models

        Raises:
            KeyError: If model name is not registered
        """
        return self.models[model_name]

    def all(self) -> Dict[str, Any]:
        """Copy of every registered model"""
        return self.models.copy()


# Global instance
model_registry = ModelRegistry()


def get_models() -> Dict[str, Any]:
    """
    Get all registered models from the current app context

    Returns:
        Dictionary containing all registered models

    Raises:
        RuntimeError: If called outside application context or before setup
    """
    if 'models' not in current_app.extensions:
        raise RuntimeError(
            "ModelRegistry not initialized. "
            "Ensure model_registry.init_app(app) is called during app setup."
        )

    return current_app.extensions['models'].all()


def get_db():
    """
    Helper to get SQLAlchemy database instance

    Raises:
        RuntimeError: If called outside application context
    """
    return current_app.extensions['sqlalchemy']
