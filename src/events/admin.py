# src/events/admin.py

import typing as t

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from . import models


class EventLinkMixin:
    """Mixin to add a link to the related event."""

    @admin.display(description="Event")
    def event_link(self, obj: t.Any) -> str:
        url = reverse("admin:events_event_change", args=[obj.event_id])
        return format_html('<a href="{}">{}</a>', url, obj.event.name)


class MerchandiseItemInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.MerchandiseItem
    extra = 0
    fields = ["name", "size", "color", "variant", "price", "stock_quantity", "order"]
    # stock only moves through conditional updates
    readonly_fields = ["stock_quantity"]


class FormFieldInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.FormField
    extra = 0
    fields = ["label", "field_type", "options", "is_required", "min_value", "max_value", "order"]


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "organizer", "kind", "status", "start", "registration_count", "registration_limit"]
    list_filter = ["kind", "status", "eligibility"]
    search_fields = ["name", "organizer__organizer_name", "organizer__username"]
    readonly_fields = ["id", "status", "registration_count", "total_revenue", "form_locked", "created_at", "updated_at"]
    date_hierarchy = "start"
    inlines = [MerchandiseItemInline, FormFieldInline]


class AttendanceAuditInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.AttendanceAudit
    extra = 0
    can_delete = False
    fields = ["created_at", "action", "marked", "actor", "reason"]
    readonly_fields = fields

    def has_add_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False


@admin.register(models.Registration)
class RegistrationAdmin(admin.ModelAdmin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["id", "event_link", "participant", "status", "payment_status", "ticket_id", "attendance_marked"]
    list_filter = ["status", "payment_status", "kind", "attendance_marked"]
    search_fields = ["ticket_id", "participant__username", "participant__email", "event__name"]
    readonly_fields = [field.name for field in models.Registration._meta.fields]
    date_hierarchy = "created_at"
    inlines = [AttendanceAuditInline]

    def has_add_permission(self, request: t.Any) -> bool:
        return False


@admin.register(models.DomainEvent)
class DomainEventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["id", "kind", "created_at", "dispatched_at", "attempts"]
    list_filter = ["kind", "dispatched_at"]
    readonly_fields = ["id", "kind", "payload", "dispatched_at", "attempts", "last_error", "created_at", "updated_at"]
    date_hierarchy = "created_at"
