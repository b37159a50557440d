import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StoreItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=32)),
                ("symbol", models.CharField(blank=True, max_length=10)),
                ("description", models.TextField(blank=True)),
                (
                    "price_in_sol",
                    models.DecimalField(decimal_places=9, default=0, max_digits=30),
                ),
                ("metadata_uri", models.CharField(max_length=255)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("updated", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="SolanaSubmission",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("transfer", "SOL transfer"),
                            ("reward", "SOL reward"),
                            ("mint", "NFT mint"),
                        ],
                        db_index=True,
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("sent", "Sent"),
                            ("confirmed", "Confirmed"),
                            ("failed", "Failed"),
                            ("timed_out", "Timed Out"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("payer_address", models.CharField(db_index=True, max_length=60)),
                (
                    "recipient_address",
                    models.CharField(
                        blank=True, db_index=True, max_length=60, null=True
                    ),
                ),
                (
                    "amount_lamports",
                    models.PositiveBigIntegerField(blank=True, null=True),
                ),
                (
                    "mint_address",
                    models.CharField(blank=True, max_length=60, null=True),
                ),
                (
                    "signature",
                    models.CharField(blank=True, max_length=128, null=True),
                ),
                (
                    "signer_tier",
                    models.CharField(
                        blank=True,
                        choices=[("primary", "Primary"), ("fallback", "Fallback")],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("reason", models.TextField(blank=True, null=True)),
                ("meta_data", models.JSONField(blank=True, default=dict, null=True)),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("updated", models.DateTimeField(auto_now=True)),
                (
                    "store_item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="submissions",
                        to="django_solana_mint.storeitem",
                    ),
                ),
            ],
            options={
                "ordering": ["-created"],
            },
        ),
    ]
