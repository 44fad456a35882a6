"""
Request-scoped acting-user context.

``CurrentUserMiddleware`` stores the current request for the duration of
the request; the user is read lazily when an audit row is written, so a
user authenticated later by DRF (JWT, session, forced auth in tests) is
still seen.  ``acting_as`` overrides the actor for scripts and
management commands.
"""
import contextvars
from contextlib import contextmanager

_current_request = contextvars.ContextVar('audit_current_request', default=None)
# Unset override; None is a valid override meaning "no actor".
_NO_OVERRIDE = object()

_acting_user = contextvars.ContextVar('audit_acting_user', default=_NO_OVERRIDE)
_suspended = contextvars.ContextVar('audit_suspended', default=False)


def set_current_request(request):
    return _current_request.set(request)


def reset_current_request(token):
    _current_request.reset(token)


def get_current_user():
    """Return the authenticated acting user, or ``None``."""
    user = _acting_user.get()
    if user is not _NO_OVERRIDE:
        return user

    request = _current_request.get()
    if request is None:
        return None

    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return user


def current_user_id():
    user = get_current_user()
    return user.pk if user is not None else None


@contextmanager
def acting_as(user):
    """
    Attribute every audit row written inside the block to ``user``.

    ``acting_as(None)`` records rows without an actor even inside a request.
    """
    token = _acting_user.set(user)
    try:
        yield user
    finally:
        _acting_user.reset(token)


@contextmanager
def audit_disabled():
    """Skip the lifecycle hooks for every save/delete inside the block."""
    token = _suspended.set(True)
    try:
        yield
    finally:
        _suspended.reset(token)


def is_audit_suspended():
    return _suspended.get()
