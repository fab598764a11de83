"""
Built-in workflow template library.

Seeded into the template table on startup (SEED_TEMPLATES) or by running
``python -m scripts.seed``. Existing rows are left untouched, so usage
counts and ratings survive restarts.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from services.template_service import TemplateService

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES = [
    # ═══════════════════════════════════════════════════════════════════
    # ALERTS
    # ═══════════════════════════════════════════════════════════════════
    {
        "id": "alert-workflow-1",
        "name": "Critical Alert Notification",
        "description": "Send notifications when critical metrics exceed thresholds",
        "category": "Alerts",
        "template": {
            "trigger": {
                "type": "METRIC_THRESHOLD",
                "config": {"metric": "error_rate", "operator": "greater_than", "value": 5},
            },
            "actions": [
                {
                    "type": "send_email",
                    "config": {
                        "to": "{{admin_email}}",
                        "subject": "Critical Alert: High Error Rate",
                        "template": "alert-notification",
                    },
                },
                {
                    "type": "slack_message",
                    "config": {"channel": "#alerts", "message": "🚨 Critical: Error rate exceeded 5%"},
                },
            ],
            "nodes": [],
            "edges": [],
        },
        "is_public": True,
        "rating": 4.5,
        "usage_count": 234,
    },
    {
        "id": "dashboard-alert-1",
        "name": "Dashboard Alert on Production Errors",
        "description": "Raise a dashboard alert and highlight the status widget when production reports errors",
        "category": "Alerts",
        "template": {
            "trigger": {"type": "EVENT", "config": {"event": "service.error"}},
            "conditions": {
                "operator": "AND",
                "rules": [
                    {"field": "environment", "operator": "equals", "value": "production"},
                    {"field": "error_count", "operator": "greater_than", "value": 0},
                ],
            },
            "actions": [
                {"type": "create_alert", "config": {"name": "Production errors", "severity": "high"}},
                {"type": "update_widget", "config": {"widgetId": "{{status_widget}}", "changes": {"state": "degraded"}}},
                {"type": "send_notification", "config": {"message": "Production is reporting errors"}},
            ],
            "nodes": [],
            "edges": [],
        },
        "is_public": True,
        "rating": 4.2,
        "usage_count": 87,
    },

    # ═══════════════════════════════════════════════════════════════════
    # INTEGRATIONS
    # ═══════════════════════════════════════════════════════════════════
    {
        "id": "webhook-relay-1",
        "name": "Webhook Relay",
        "description": "Forward every trigger payload to an external HTTP endpoint",
        "category": "Integrations",
        "template": {
            "trigger": {"type": "WEBHOOK", "config": {}},
            "actions": [
                {
                    "type": "webhook",
                    "config": {"url": "https://hooks.example.com/relay", "method": "POST"},
                    "timeout": 15,
                },
            ],
            "nodes": [],
            "edges": [],
        },
        "is_public": True,
        "rating": 4.0,
        "usage_count": 42,
    },
]


async def seed_templates(db: AsyncSession) -> int:
    """Insert any built-in template that is not in the table yet.

    Returns:
        Number of templates now present from the built-in library.
    """
    service = TemplateService(db)
    for data in BUILTIN_TEMPLATES:
        await service.upsert_template(data)
    logger.info(f"Template library ready ({len(BUILTIN_TEMPLATES)} built-in templates)")
    return len(BUILTIN_TEMPLATES)
