from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RegistrationRecord",
            fields=[
                (
                    "address",
                    models.CharField(max_length=128, primary_key=True, serialize=False),
                ),
                (
                    "subscription",
                    models.CharField(blank=True, max_length=128, null=True),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "ofr_registrations",
                "ordering": ["address"],
                "indexes": [
                    models.Index(fields=["subscription"], name="idx_ofr_reg_subscription"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SetMember",
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
                ("collection", models.CharField(max_length=32)),
                ("owner", models.CharField(max_length=128)),
                ("value", models.CharField(max_length=128)),
                ("position", models.PositiveIntegerField()),
            ],
            options={
                "db_table": "ofr_set_members",
                "ordering": ["collection", "owner", "position"],
                "indexes": [
                    models.Index(fields=["collection", "owner"], name="idx_ofr_member_owner"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("collection", "owner", "value"),
                        name="uq_ofr_member_value",
                    ),
                    models.UniqueConstraint(
                        fields=("collection", "owner", "position"),
                        name="uq_ofr_member_position",
                    ),
                ],
            },
        ),
    ]
