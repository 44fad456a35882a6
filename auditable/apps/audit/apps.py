from django.apps import AppConfig


class AuditConfig(AppConfig):
    default_auto_field = 'django.db.models.AutoField'
    name = 'auditable.apps.audit'
    label = 'audit'
    verbose_name = 'Audit Log'

    def ready(self):
        from .signals import connect_auditable_models

        connect_auditable_models()
