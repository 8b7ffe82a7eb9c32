"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import FelicityUser


@admin.register(FelicityUser)
class FelicityUserAdmin(UserAdmin):  # type: ignore[type-arg]
    list_display = ("username", "email", "role", "participant_type", "organizer_name", "is_active")
    list_filter = ("role", "participant_type", "is_active", "is_staff")
    search_fields = ("username", "email", "first_name", "last_name", "organizer_name")
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        (
            "Felicity",
            {
                "fields": (
                    "role",
                    "participant_type",
                    "contact_number",
                    "college_name",
                    "organizer_name",
                    "organizer_category",
                    "organizer_description",
                )
            },
        ),
    )
