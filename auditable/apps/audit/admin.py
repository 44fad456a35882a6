"""
Audit Log Admin - READ ONLY

Audit logs are immutable and cannot be added, edited or deleted via admin.
"""
from django.contrib import admin
from django.utils.html import format_html

from .models import AuditableLog


@admin.register(AuditableLog)
class AuditableLogAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'created_at',
        'user',
        'key',
        'auditable_type',
        'auditable_id',
    ]

    list_filter = [
        'key',
        'auditable_type',
        'created_at',
    ]

    search_fields = [
        'key',
        'auditable_type',
        'user__username',
    ]

    readonly_fields = [
        'auditable_type',
        'auditable_id',
        'user',
        'key',
        'old_value_display',
        'new_value_display',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Owner', {
            'fields': ('auditable_type', 'auditable_id', 'key')
        }),
        ('User Information', {
            'fields': ('user',)
        }),
        ('Values', {
            'fields': ('old_value_display', 'new_value_display', 'created_at', 'updated_at'),
        }),
    )

    date_hierarchy = 'created_at'

    ordering = ['-created_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description='Old value')
    def old_value_display(self, obj):
        return format_html('<pre>{}</pre>', obj.old_value) if obj.old_value else '-'

    @admin.display(description='New value')
    def new_value_display(self, obj):
        return format_html('<pre>{}</pre>', obj.new_value) if obj.new_value else '-'
