from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("django_solana_mint", "0001_initial"),
    ]

    operations = [
        migrations.AddConstraint(
            model_name="solanasubmission",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status__in", ["pending", "sent"])),
                fields=("kind", "payer_address"),
                name="unique_in_flight_submission_per_payer",
            ),
        ),
    ]
