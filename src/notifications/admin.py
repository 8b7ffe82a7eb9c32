"""Django admin for notification models."""

from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["id", "notification_type", "user", "title", "is_read", "created_at"]
    list_filter = ["notification_type", "read_at", "created_at"]
    search_fields = ["user__email", "user__username", "title", "body"]
    readonly_fields = ["id", "created_at", "updated_at", "notification_type", "context"]
    date_hierarchy = "created_at"

    @admin.display(boolean=True)
    def is_read(self, obj: Notification) -> bool:
        return obj.is_read
