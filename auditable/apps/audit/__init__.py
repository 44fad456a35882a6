"""
Audit app: field-level change history for Django models.

Subclass ``auditable.apps.audit.mixins.AuditableModel`` to have creates,
updates and deletes recorded as ``AuditableLog`` rows.  Add
``auditable.apps.audit.middleware.CurrentUserMiddleware`` to
``MIDDLEWARE`` so rows carry the acting user, and include
``auditable.apps.audit.api.urls`` to query the log over HTTP.
"""
