from django.contrib import admin
from .models import RecipientRequest


@admin.register(RecipientRequest)
class RecipientRequestAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'required_organ', 'bloodgroup', 'urgency', 'status', 'created_at')
    list_filter = ('status', 'urgency', 'required_organ', 'documents_verified')
    search_fields = ('patient_name',)
