import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="EmailDelivery",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("dedupe_key", models.CharField(max_length=255, unique=True)),
                ("recipient", models.EmailField(max_length=254)),
                ("subject", models.CharField(max_length=255)),
                ("order_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("sent_at", models.DateTimeField()),
            ],
            options={
                "db_table": "email_deliveries",
                "ordering": ["-sent_at"],
            },
        ),
    ]
