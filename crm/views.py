"""
Views for the CRM app - prospect list, prospect detail and follow-up notes.
"""

import logging

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.db.models import Q
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views import View
from django.views.generic import DetailView, ListView

from .forms import ProspectFilterForm, ProspectNoteForm
from .models import Prospect, ProspectNote
from .services import ProspectManagementService

logger = logging.getLogger(__name__)


class ProspectListView(LoginRequiredMixin, ListView):
    """List prospects with status and free-text filters."""

    model = Prospect
    template_name = 'crm/prospect_list.html'
    context_object_name = 'prospects'
    paginate_by = 25

    def get_queryset(self):
        queryset = Prospect.objects.select_related('assigned_to')
        self.filter_form = ProspectFilterForm(self.request.GET or None)
        if self.filter_form.is_valid():
            query = self.filter_form.cleaned_data.get('q')
            status = self.filter_form.cleaned_data.get('status')
            if query:
                queryset = queryset.filter(
                    Q(email__icontains=query)
                    | Q(first_name__icontains=query)
                    | Q(last_name__icontains=query)
                    | Q(company__icontains=query)
                )
            if status:
                queryset = queryset.filter(status=status)
        return queryset

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['filter_form'] = self.filter_form
        context['duplicate_count'] = len(ProspectManagementService().find_duplicate_emails())
        return context


class ProspectDetailView(LoginRequiredMixin, DetailView):
    """A prospect with its touchpoint timeline, notes and lead score."""

    model = Prospect
    template_name = 'crm/prospect_detail.html'
    context_object_name = 'prospect'

    def get_queryset(self):
        return Prospect.objects.prefetch_related('interested_formations', 'interested_services')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        prospect = self.object
        context['interactions'] = prospect.get_all_interactions()
        context['notes'] = ProspectNote.objects.for_prospect(prospect)
        context['note_stats'] = ProspectNote.objects.prospect_statistics(prospect)
        context['lead_score'] = prospect.lead_score()
        context['note_form'] = kwargs.get('note_form') or ProspectNoteForm()
        return context


class ProspectNoteCreateView(LoginRequiredMixin, View):
    """Add a note to a prospect. Returns the notes partial for HTMX requests."""

    def post(self, request, pk):
        prospect = get_object_or_404(Prospect, pk=pk)
        form = ProspectNoteForm(request.POST)

        if not form.is_valid():
            if request.htmx:
                return render(request, 'crm/partials/note_form.html', {
                    'prospect': prospect,
                    'note_form': form,
                }, status=422)
            messages.error(request, 'La note n\'a pas pu être enregistrée.')
            return redirect('crm:prospect-detail', pk=prospect.pk)

        note = form.save(commit=False)
        note.prospect = prospect
        note.created_by = request.user
        note.save()
        logger.info(f"Note id={note.pk} type={note.type} added to prospect id={prospect.pk} by user id={request.user.pk}")

        if request.htmx:
            return render(request, 'crm/partials/note_list.html', {
                'prospect': prospect,
                'notes': ProspectNote.objects.for_prospect(prospect),
            })

        messages.success(request, f'Note "{note.title}" ajoutée.')
        return redirect('crm:prospect-detail', pk=prospect.pk)


class ProspectNoteCompleteView(LoginRequiredMixin, View):
    """Mark a pending note as done."""

    def post(self, request, pk):
        note = get_object_or_404(ProspectNote, pk=pk)
        note.mark_completed()
        messages.success(request, f'Tâche "{note.title}" terminée.')
        return redirect('crm:prospect-detail', pk=note.prospect_id)


class MergeDuplicatesView(LoginRequiredMixin, View):
    """Run the duplicate merge job from the prospect list."""

    def post(self, request):
        merged = ProspectManagementService().merge_duplicate_prospects()
        if merged:
            messages.success(request, f'{merged} prospect(s) en double fusionné(s).')
        else:
            messages.info(request, 'Aucun doublon à fusionner.')
        return redirect(reverse('crm:prospect-list'))


class NoteActivityView(LoginRequiredMixin, View):
    """Notes activity: today's schedule, overdue tasks and recent activity."""

    def get(self, request):
        query = request.GET.get('q', '').strip()
        context = {
            'stats': ProspectNote.objects.activity_statistics(),
            'today': ProspectNote.objects.scheduled_for_today().select_related('prospect'),
            'overdue': ProspectNote.objects.overdue().select_related('prospect'),
            'recent': ProspectNote.objects.recent_activity(),
            'daily_activity': ProspectNote.objects.daily_activity(),
            'query': query,
            'results': ProspectNote.objects.search(query).select_related('prospect')[:50] if query else None,
        }
        return render(request, 'crm/note_activity.html', context)
