from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SysApi",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("path", models.CharField(help_text="API path, e.g. /api/createApi", max_length=255)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("api_group", models.CharField(blank=True, default="", max_length=255)),
                ("method", models.CharField(default="POST", max_length=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "API",
                "verbose_name_plural": "APIs",
                "db_table": "sys_apis",
            },
        ),
        migrations.AddConstraint(
            model_name="sysapi",
            constraint=models.UniqueConstraint(fields=("path", "method"), name="unique_sys_api_path_method"),
        ),
    ]
