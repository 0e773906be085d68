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
                (
                    "kind",
                    models.CharField(
                        choices=[("normal", "Normal"), ("team", "Team"), ("merchandise", "Merchandise")],
                        db_index=True,
                        default="normal",
                        max_length=20,
                    ),
                ),
                ("start", models.DateTimeField(blank=True, null=True)),
                ("end", models.DateTimeField(blank=True, null=True)),
                (
                    "registration_limit",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Maximum number of admitted registrations. Empty means unlimited.",
                        null=True,
                    ),
                ),
                ("registration_deadline", models.DateTimeField(blank=True, null=True)),
                ("registrations_closed", models.BooleanField(default=False)),
                (
                    "registration_fee",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="organized_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "registered_participants",
                    models.ManyToManyField(blank=True, related_name="joined_events", to=settings.AUTH_USER_MODEL),
                ),
            ],
            options={
                "ordering": ["-start", "name"],
            },
        ),
        migrations.CreateModel(
            name="MerchandiseVariant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(max_length=150)),
                ("size", models.CharField(blank=True, default="", max_length=20)),
                ("color", models.CharField(blank=True, default="", max_length=50)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("stock", models.PositiveIntegerField(default=0)),
                ("position", models.PositiveSmallIntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="variants", to="events.event"
                    ),
                ),
            ],
            options={
                "ordering": ["position", "created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("stock__gte", 0)), name="merchandise_variant_stock_non_negative"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("ticket_id", models.CharField(editable=False, max_length=64, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("registered", "Registered"),
                            ("waitlisted", "Waitlisted"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="registered",
                        max_length=20,
                    ),
                ),
                ("team_name", models.CharField(blank=True, default="", max_length=150)),
                ("custom_form_data", models.JSONField(blank=True, default=dict)),
                ("credential_payload", models.TextField(blank=True, default="")),
                (
                    "qr_code",
                    models.TextField(blank=True, default="", help_text="PNG data URL of the encoded credential."),
                ),
                ("email_sent", models.BooleanField(default=False)),
                (
                    "payment_status",
                    models.CharField(
                        blank=True,
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        max_length=20,
                        null=True,
                    ),
                ),
                (
                    "payment_proof",
                    models.TextField(blank=True, default="", help_text="Opaque object storage reference."),
                ),
                ("payment_remarks", models.TextField(blank=True, default="")),
                ("payment_approved_at", models.DateTimeField(blank=True, null=True)),
                ("amount_paid", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("attended", models.BooleanField(default=False)),
                ("attendance_marked_at", models.DateTimeField(blank=True, null=True)),
                (
                    "attendance_method",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("camera_scan", "Camera scan"),
                            ("image_upload", "Image upload"),
                            ("manual", "Manual"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                ("attendance_notes", models.TextField(blank=True, default="")),
                (
                    "attendance_marked_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="events.event"
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
                (
                    "payment_approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("participant", "event"), name="unique_registration_per_participant")
                ],
            },
        ),
        migrations.CreateModel(
            name="RegistrationItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("quantity", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("position", models.PositiveSmallIntegerField(default=0)),
                (
                    "registration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="events.registration"
                    ),
                ),
                (
                    "variant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="line_items",
                        to="events.merchandisevariant",
                    ),
                ),
            ],
            options={
                "ordering": ["position"],
            },
        ),
    ]
