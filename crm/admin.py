from django.contrib import admin, messages

from .models import ContactRequest, NeedsAnalysisRequest, Prospect, ProspectNote, SessionRegistration
from .services import ProspectManagementService


class ProspectNoteInline(admin.TabularInline):
    model = ProspectNote
    extra = 0
    fields = ['title', 'type', 'status', 'scheduled_at', 'is_important']
    show_change_link = True


@admin.register(Prospect)
class ProspectAdmin(admin.ModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'company', 'status', 'priority', 'source', 'created_at']
    list_filter = ['status', 'priority', 'source']
    search_fields = ['email', 'first_name', 'last_name', 'company']
    date_hierarchy = 'created_at'
    raw_id_fields = ['assigned_to']
    filter_horizontal = ['interested_formations', 'interested_services']
    inlines = [ProspectNoteInline]
    actions = ['merge_duplicates']

    @admin.action(description='Fusionner les prospects en double (toutes adresses)')
    def merge_duplicates(self, request, queryset):
        merged = ProspectManagementService().merge_duplicate_prospects()
        self.message_user(request, f'{merged} prospect(s) fusionné(s).', messages.SUCCESS)


class TouchpointAdmin(admin.ModelAdmin):
    """Shared admin for touchpoints: adds a 'link to prospect' action."""
    raw_id_fields = ['prospect']
    date_hierarchy = 'created_at'
    actions = ['link_to_prospect']

    @admin.action(description='Rattacher à un prospect')
    def link_to_prospect(self, request, queryset):
        service = ProspectManagementService()
        ingest = {
            ContactRequest: service.create_prospect_from_contact_request,
            SessionRegistration: service.create_prospect_from_session_registration,
            NeedsAnalysisRequest: service.create_prospect_from_needs_analysis,
        }[self.model]
        linked = 0
        for touchpoint in queryset:
            ingest(touchpoint)
            linked += 1
        self.message_user(request, f'{linked} élément(s) rattaché(s).', messages.SUCCESS)


@admin.register(ContactRequest)
class ContactRequestAdmin(TouchpointAdmin):
    list_display = ['email', 'type', 'status', 'formation', 'prospect', 'created_at']
    list_filter = ['type', 'status']
    search_fields = ['email', 'first_name', 'last_name', 'company', 'subject']
    raw_id_fields = ['prospect', 'formation', 'service']


@admin.register(SessionRegistration)
class SessionRegistrationAdmin(TouchpointAdmin):
    list_display = ['email', 'session', 'status', 'prospect', 'created_at']
    list_filter = ['status']
    search_fields = ['email', 'first_name', 'last_name', 'company']
    raw_id_fields = ['prospect', 'session']


@admin.register(NeedsAnalysisRequest)
class NeedsAnalysisRequestAdmin(TouchpointAdmin):
    list_display = ['recipient_email', 'type', 'status', 'formation', 'prospect', 'created_at']
    list_filter = ['type', 'status']
    search_fields = ['recipient_email', 'recipient_name', 'company_name']
    raw_id_fields = ['prospect', 'formation']


@admin.register(ProspectNote)
class ProspectNoteAdmin(admin.ModelAdmin):
    list_display = ['title', 'prospect', 'type', 'status', 'scheduled_at', 'is_important', 'created_by', 'created_at']
    list_filter = ['type', 'status', 'is_important', 'is_private']
    search_fields = ['title', 'content', 'prospect__email']
    date_hierarchy = 'created_at'
    raw_id_fields = ['prospect', 'created_by']
