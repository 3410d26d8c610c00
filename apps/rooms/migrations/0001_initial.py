from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("room_code", models.CharField(blank=True, max_length=50)),
                ("description", models.TextField(blank=True)),
                (
                    "base_price_per_night",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        blank=True,
                        max_length=3,
                        validators=[
                            django.core.validators.RegexValidator(
                                message="Use a three letter ISO 4217 currency code.",
                                regex="^[A-Z]{3}$",
                            )
                        ],
                    ),
                ),
                (
                    "inventory_mode",
                    models.CharField(
                        choices=[
                            ("single_unit", "Single unit"),
                            ("room_type", "Room type (multiple units)"),
                        ],
                        default="single_unit",
                        max_length=20,
                    ),
                ),
                (
                    "total_units",
                    models.PositiveIntegerField(
                        default=1, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "max_guests",
                    models.PositiveSmallIntegerField(
                        default=2, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "min_stay_nights",
                    models.PositiveSmallIntegerField(
                        default=1, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "max_stay_nights",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text="Leave empty for no upper limit.",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rooms",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Room",
                "verbose_name_plural": "Rooms",
                "ordering": ["name", "id"],
                "indexes": [models.Index(fields=["tenant", "is_active"], name="room_tenant_active_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total_units__gte=1),
                        name="room_total_units_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(base_price_per_night__gte=0),
                        name="room_base_price_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=(
                            models.Q(max_stay_nights__isnull=True)
                            | models.Q(max_stay_nights__gte=models.F("min_stay_nights"))
                        ),
                        name="room_min_max_stay_valid",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SeasonalRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(help_text="Inclusive: the rate applies to this night too.")),
                (
                    "price_per_night",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "priority",
                    models.IntegerField(default=0, help_text="Where windows overlap the higher priority wins."),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="seasonal_rates",
                        to="rooms.room",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="seasonal_rates",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Seasonal rate",
                "verbose_name_plural": "Seasonal rates",
                "ordering": ["start_date", "-priority"],
                "indexes": [
                    models.Index(
                        fields=["tenant", "room", "start_date", "end_date"],
                        name="seasonal_rate_window_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_date__gte=models.F("start_date")),
                        name="seasonal_rate_valid_date_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(price_per_night__gte=0),
                        name="seasonal_rate_price_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AddOn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True)),
                ("addon_code", models.CharField(blank=True, max_length=50)),
                (
                    "addon_type",
                    models.CharField(
                        choices=[("service", "Service"), ("product", "Product"), ("experience", "Experience")],
                        default="service",
                        max_length=20,
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "pricing_type",
                    models.CharField(
                        choices=[
                            ("per_booking", "Per booking"),
                            ("per_night", "Per night"),
                            ("per_guest", "Per guest"),
                            ("per_guest_per_night", "Per guest per night"),
                        ],
                        default="per_booking",
                        max_length=30,
                    ),
                ),
                (
                    "max_quantity",
                    models.PositiveSmallIntegerField(
                        default=10, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "rooms",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Leave empty to offer the add-on for every room.",
                        related_name="addons",
                        to="rooms.room",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="addons",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Add-on",
                "verbose_name_plural": "Add-ons",
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__gte=0),
                        name="addon_price_non_negative",
                    ),
                ],
            },
        ),
    ]
