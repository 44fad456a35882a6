"""
Registry of tracked model types.

Log rows reference their owner by ``(auditable_type, auditable_id)`` where
``auditable_type`` is the model's lower-cased label (``"app.model"``).
The registry maps that discriminator back to the model class so the owner
can be loaded.
"""
from django.apps import apps

_registry = {}


def discriminator_for(model):
    """Accepts a model class or instance."""
    return model._meta.label_lower


def register(model):
    _registry[discriminator_for(model)] = model
    return model


def registered_models():
    return list(_registry.values())


def get_model(discriminator):
    if not discriminator:
        return None
    model = _registry.get(discriminator)
    if model is not None:
        return model
    try:
        return apps.get_model(discriminator)
    except (LookupError, ValueError):
        return None


def load_instance(discriminator, pk):
    """Return the owning instance, or ``None`` if it cannot be found."""
    model = get_model(discriminator)
    if model is None or pk is None:
        return None
    try:
        return model._default_manager.get(pk=pk)
    except model.DoesNotExist:
        return None
