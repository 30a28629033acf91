from django.contrib import admin
from .models import Donor, DonorOrgan


class DonorOrganInline(admin.TabularInline):
    model = DonorOrgan
    extra = 0


@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'bloodgroup', 'availability', 'documents_verified', 'created_at')
    list_filter = ('availability', 'documents_verified', 'bloodgroup')
    search_fields = ('full_name',)
    inlines = [DonorOrganInline]
