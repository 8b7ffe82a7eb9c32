import uuid
from decimal import Decimal

import django.core.validators
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
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "kind",
                    models.CharField(
                        choices=[("normal", "Normal"), ("merchandise", "Merchandise")],
                        db_index=True,
                        default="normal",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("published", "Published"),
                            ("ongoing", "Ongoing"),
                            ("closed", "Closed"),
                            ("completed", "Completed"),
                        ],
                        db_index=True,
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("start", models.DateTimeField(blank=True, null=True)),
                ("end", models.DateTimeField(blank=True, null=True)),
                ("registration_deadline", models.DateTimeField(blank=True, null=True)),
                (
                    "registration_fee",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "eligibility",
                    models.CharField(
                        choices=[
                            ("all", "Everyone"),
                            ("iiit_only", "IIIT participants only"),
                            ("non_iiit_only", "Non-IIIT participants only"),
                        ],
                        default="all",
                        max_length=20,
                    ),
                ),
                (
                    "registration_limit",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Empty means unlimited.",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("registration_count", models.PositiveIntegerField(default=0, editable=False)),
                (
                    "total_revenue",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), editable=False, max_digits=12),
                ),
                (
                    "purchase_limit_per_participant",
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("form_locked", models.BooleanField(default=False, editable=False)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="organized_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "start"], name="idx_event_status_start"),
                    models.Index(fields=["status", "end"], name="idx_event_status_end"),
                    models.Index(fields=["organizer", "status"], name="idx_event_organizer_status"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("registration_limit__isnull", True))
                        | models.Q(("registration_count__lte", models.F("registration_limit"))),
                        name="event_count_within_limit",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("total_revenue__gte", 0)), name="event_revenue_non_negative"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("registration_fee__gte", 0)), name="event_fee_non_negative"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MerchandiseItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(max_length=255)),
                ("size", models.CharField(blank=True, default="", max_length=50)),
                ("color", models.CharField(blank=True, default="", max_length=50)),
                ("variant", models.CharField(blank=True, default="", max_length=100)),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("order", models.PositiveIntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="events.event"
                    ),
                ),
            ],
            options={
                "ordering": ["order", "created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("stock_quantity__gte", 0)), name="item_stock_non_negative"
                    ),
                    models.CheckConstraint(condition=models.Q(("price__gte", 0)), name="item_price_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FormField",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("label", models.CharField(max_length=255)),
                (
                    "field_type",
                    models.CharField(
                        choices=[
                            ("text", "Text"),
                            ("textarea", "Text area"),
                            ("dropdown", "Dropdown"),
                            ("checkbox", "Checkbox"),
                            ("radio", "Radio"),
                            ("file", "File"),
                            ("email", "Email"),
                            ("phone", "Phone"),
                            ("number", "Number"),
                        ],
                        default="text",
                        max_length=20,
                    ),
                ),
                ("options", models.JSONField(blank=True, default=list)),
                ("is_required", models.BooleanField(default=False)),
                ("min_value", models.FloatField(blank=True, null=True)),
                ("max_value", models.FloatField(blank=True, null=True)),
                ("order", models.PositiveIntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="form_fields", to="events.event"
                    ),
                ),
            ],
            options={
                "ordering": ["order", "created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "label"), name="unique_event_form_label"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[("normal", "Normal"), ("merchandise", "Merchandise")],
                        default="normal",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("cancelled", "Cancelled"), ("rejected", "Rejected")],
                        db_index=True,
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("free", "Free"),
                            ("pending_approval", "Pending approval"),
                            ("paid", "Paid"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="free",
                        max_length=20,
                    ),
                ),
                ("ticket_id", models.CharField(blank=True, max_length=32, null=True, unique=True)),
                ("qr_payload", models.TextField(blank=True, default="")),
                ("ticketed_at", models.DateTimeField(blank=True, null=True)),
                ("form_responses", models.JSONField(blank=True, default=list)),
                ("item_name", models.CharField(blank=True, default="", max_length=255)),
                ("item_size", models.CharField(blank=True, default="", max_length=50)),
                ("item_color", models.CharField(blank=True, default="", max_length=50)),
                ("item_variant", models.CharField(blank=True, default="", max_length=100)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("price_at_purchase", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("amount_due", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("payment_proof_url", models.URLField(blank=True, default="", max_length=1000)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("attendance_marked", models.BooleanField(default=False)),
                ("attendance_marked_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="events.event"
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="events.merchandiseitem",
                    ),
                ),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["event", "payment_status"], name="idx_reg_event_payment"),
                    models.Index(fields=["event", "status"], name="idx_reg_event_status"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("participant", "event"), name="unique_participant_event"),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)), name="registration_quantity_positive"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("amount_due__gte", 0)), name="registration_amount_non_negative"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AttendanceAudit",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "action",
                    models.CharField(
                        choices=[("scan", "Scan"), ("mark", "Manual mark"), ("unmark", "Manual unmark")],
                        max_length=10,
                    ),
                ),
                ("marked", models.BooleanField(help_text="The attendance flag after this change.")),
                ("reason", models.TextField(blank=True, default="")),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "registration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendance_audits",
                        to="events.registration",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="DomainEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("registration_created", "Registration created"),
                            ("registration_cancelled", "Registration cancelled"),
                            ("payment_proof_submitted", "Payment proof submitted"),
                            ("payment_approved", "Payment approved"),
                            ("payment_rejected", "Payment rejected"),
                            ("event_published", "Event published"),
                            ("event_started", "Event started"),
                            ("event_closed", "Event closed"),
                            ("event_completed", "Event completed"),
                        ],
                        db_index=True,
                        max_length=40,
                    ),
                ),
                ("payload", models.JSONField(default=dict)),
                ("dispatched_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("last_error", models.TextField(blank=True, default="")),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["dispatched_at", "created_at"], name="idx_domain_event_pending"),
                ],
            },
        ),
    ]
