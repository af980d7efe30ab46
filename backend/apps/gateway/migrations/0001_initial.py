"""
Initial gateway audit log table.
"""

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="GatewayAuditLog",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "request_type",
                    models.CharField(
                        choices=[
                            ("agents.create", "Create agent"),
                            ("agents.update", "Update agent"),
                            ("agents.list", "List agents"),
                            ("agents.deploy", "Deploy agent"),
                            ("session-config.get", "Get session config"),
                            ("preview.update", "Update preview session"),
                            ("voices.list", "List voices"),
                            ("voices.sync", "Sync voices"),
                            ("voices.preview", "Preview voice"),
                            ("calls.create", "Create call"),
                            ("calls.list", "List calls"),
                            ("calls.sync", "Sync calls"),
                            ("calls.outbound", "Outbound call"),
                            ("calls.bulk", "Bulk calls"),
                            ("phone-numbers.list", "List phone numbers"),
                            ("phone-numbers.create", "Create phone number"),
                            ("contacts.list", "List contacts"),
                            ("contacts.create", "Create contact"),
                            ("crm.projects.list", "List CRM projects"),
                            ("crm.projects.create", "Create CRM project"),
                            ("crm.projects.get", "Get CRM project"),
                            ("crm.projects.update", "Update CRM project"),
                            ("settings.integrations.providers", "List integration providers"),
                            ("settings.integrations.list", "List integrations"),
                            ("settings.integrations.create", "Create integration"),
                            ("settings.integrations.update", "Update integration"),
                            ("settings.integrations.delete", "Delete integration"),
                            ("dashboard.overview", "Dashboard overview"),
                            ("settings.status", "Settings status"),
                            ("webhooks.receive", "Receive webhook"),
                            ("audit.list", "List audit log"),
                        ],
                        db_index=True,
                        help_text="Gateway action tag, e.g. 'agents.create'",
                        max_length=64,
                    ),
                ),
                ("method", models.CharField(max_length=10)),
                ("path", models.CharField(max_length=2048)),
                ("status_code", models.PositiveSmallIntegerField()),
                ("success", models.BooleanField(help_text="200 <= status_code < 400")),
                ("resource_id", models.CharField(blank=True, max_length=255, null=True)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.TextField(blank=True, null=True)),
                (
                    "duration_ms",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Wall-clock time spent in the gateway",
                        null=True,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        editable=False,
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="gateway_audit_logs",
                        to="organizations.organization",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="NULL for system-originated calls, e.g. webhooks",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="gateway_audit_logs",
                        to="accounts.user",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["organization", "created_at"],
                        name="gateway_audit_org_time_idx",
                    ),
                    models.Index(
                        fields=["organization", "user", "created_at"],
                        name="gateway_audit_user_time_idx",
                    ),
                ],
            },
        ),
    ]
