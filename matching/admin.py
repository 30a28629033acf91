from django.contrib import admin
from .models import AuditLog, Match, Notification


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    list_display = ('id', 'donor', 'recipient', 'organ_type', 'score', 'status', 'created_at')
    list_filter = ('status', 'organ_type', 'renewable')
    readonly_fields = ('donor', 'recipient', 'organ_type', 'renewable', 'score', 'created_at')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('action', 'entity', 'entity_id', 'actor', 'created_at')
    list_filter = ('action', 'entity')
    readonly_fields = ('actor', 'action', 'entity', 'entity_id', 'metadata', 'created_at')


admin.site.register(Notification)
