from django.contrib import admin
from .models import Formation, Service, Session


@admin.register(Formation)
class FormationAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['title', 'description']
    prepopulated_fields = {'slug': ('title',)}


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['title', 'description']
    prepopulated_fields = {'slug': ('title',)}


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ['name', 'formation', 'start_date', 'end_date', 'location']
    list_filter = ['formation']
    search_fields = ['name', 'formation__title', 'location']
    date_hierarchy = 'start_date'
    raw_id_fields = ['formation']
