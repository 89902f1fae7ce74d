from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from django.urls import reverse

from . import policies
from .labels import label_for
from .models import User, LawyerProfile, Client, Case, Document, Consultation

# Customize the admin site
admin.site.site_header = 'Law Firm Administration'
admin.site.site_title = 'Law Firm Admin'
admin.site.index_title = 'Welcome to Law Firm Admin'

STATUS_COLORS = {
    'NEW': '#17a2b8',
    'IN_PROGRESS': '#007bff',
    'AWAITING_HEARING': '#ffc107',
    'SUSPENDED': '#6c757d',
    'WON': '#28a745',
    'SETTLED': '#28a745',
    'LOST': '#dc3545',
    'CLOSED': '#6c757d',
    'SCHEDULED': '#17a2b8',
    'CONFIRMED': '#007bff',
    'COMPLETED': '#28a745',
}


def badge(code, table_name):
    return format_html(
        '<span style="display: inline-block; min-width: 70px; text-align: center; '
        'background-color: {}; color: white; padding: 4px 10px; '
        'border-radius: 12px; font-size: 12px; font-weight: 500;">{}</span>',
        STATUS_COLORS.get(code, '#6c757d'),
        label_for(table_name, code).upper(),
    )


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'email', 'first_name', 'last_name', 'role', 'is_active')
    list_filter = ('role', 'is_staff', 'is_superuser', 'is_active')
    search_fields = ('username', 'first_name', 'last_name', 'email')
    ordering = ('username',)
    fieldsets = (
        (None, {'fields': ('username', 'password')}),
        ('Personal info', {'fields': ('first_name', 'last_name', 'email', 'phone')}),
        ('Permissions', {'fields': ('role', 'is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )


@admin.register(LawyerProfile)
class LawyerProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'specialization', 'photo')


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'phone', 'case_count', 'created_at', 'user_link')
    search_fields = ('name', 'email', 'phone', 'user__username', 'user__email')
    list_filter = ('created_at',)
    date_hierarchy = 'created_at'
    ordering = ('-created_at',)
    readonly_fields = ('created_at', 'user_link')

    def get_queryset(self, request):
        return policies.visible_clients(request.user, super().get_queryset(request))

    def user_link(self, obj):
        if obj.user:
            url = reverse('admin:core_user_change', args=[obj.user.id])
            return format_html('<a href="{0}">{1}</a>', url, obj.user.username)
        return 'No user account'
    user_link.short_description = 'User Account'

    def case_count(self, obj):
        count = obj.cases.count()
        url = reverse('admin:core_case_changelist') + f'?client__id__exact={obj.id}'
        return format_html('<a href="{0}">{1}</a>', url, count)
    case_count.short_description = 'Cases'


class DocumentInline(admin.TabularInline):
    model = Document
    fields = ('title', 'document_type', 'status', 'is_important', 'file')
    extra = 0
    can_delete = False


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    list_display = ('case_number', 'title', 'client_link', 'status_badge', 'priority', 'lawyer', 'open_date', 'next_hearing_date')
    list_display_links = ('case_number', 'title')
    list_filter = ('status', 'category', 'priority', 'open_date', 'lawyer')
    search_fields = ('case_number', 'title', 'description', 'client__name')
    date_hierarchy = 'open_date'
    ordering = ('-open_date',)
    readonly_fields = ('created_at', 'updated_at')
    inlines = [DocumentInline]

    def get_queryset(self, request):
        return policies.visible_cases(request.user, super().get_queryset(request))

    def client_link(self, obj):
        url = reverse('admin:core_client_change', args=[obj.client.id])
        return format_html('<a href="{0}">{1}</a>', url, obj.client.name)
    client_link.short_description = 'Client'
    client_link.admin_order_field = 'client__name'

    def status_badge(self, obj):
        return badge(obj.status, 'case_status')
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ('title', 'case', 'document_type', 'status', 'is_important', 'file_size_display', 'uploaded_at')
    list_filter = ('document_type', 'status', 'is_important', 'uploaded_at')
    search_fields = ('title', 'case__title', 'case__case_number', 'description')
    date_hierarchy = 'uploaded_at'
    readonly_fields = ('file_name', 'file_size', 'mime_type', 'uploaded_at', 'updated_at')
    list_per_page = 25

    def file_size_display(self, obj):
        size = obj.file_size
        if size is None:
            return 'N/A'
        if size < 1024:
            return f"{size} B"
        elif size < 1024 * 1024:
            return f"{size / 1024:.1f} KB"
        return f"{size / (1024 * 1024):.1f} MB"
    file_size_display.short_description = 'Size'


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ('topic', 'client', 'lawyer', 'start_time', 'duration_minutes', 'status_badge', 'is_paid')
    list_filter = ('status', 'consultation_type', 'is_paid', 'lawyer')
    search_fields = ('topic', 'client__name', 'client__email')
    date_hierarchy = 'start_time'
    ordering = ('-start_time',)
    readonly_fields = ('created_at', 'updated_at')

    def get_queryset(self, request):
        return policies.visible_consultations(request.user, super().get_queryset(request))

    def status_badge(self, obj):
        return badge(obj.status, 'consultation_status')
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
