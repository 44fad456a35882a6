from .context import reset_current_request, set_current_request


class CurrentUserMiddleware:
    """
    Makes the current request available to the audit hooks.

    Add ``auditable.apps.audit.middleware.CurrentUserMiddleware`` to
    ``MIDDLEWARE`` after ``AuthenticationMiddleware``.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        token = set_current_request(request)
        try:
            return self.get_response(request)
        finally:
            reset_current_request(token)
