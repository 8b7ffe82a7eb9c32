import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("registration_confirmed", "Registration Confirmed"),
                            ("registration_pending_payment", "Registration Pending Payment"),
                            ("registration_cancelled", "Registration Cancelled"),
                            ("payment_proof_submitted", "Payment Proof Submitted"),
                            ("payment_approved", "Payment Approved"),
                            ("payment_rejected", "Payment Rejected"),
                            ("event_published", "Event Published"),
                            ("event_started", "Event Started"),
                            ("event_closed", "Event Closed"),
                            ("event_completed", "Event Completed"),
                        ],
                        db_index=True,
                        max_length=50,
                    ),
                ),
                ("title", models.CharField(blank=True, default="", max_length=255)),
                ("body", models.TextField(blank=True, default="")),
                ("context", models.JSONField(blank=True, default=dict)),
                ("read_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "read_at"], name="idx_notification_user_read"),
                    models.Index(fields=["user", "created_at"], name="idx_notification_user_created"),
                ],
            },
        ),
    ]
