"""Tests for the workflow, execution and template services."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import inspect

from core.constants import ExecutionStatus
from core.exceptions import NotFoundError, ValidationError
from db.models.execution import WorkflowExecution
from db.models.workflow import Workflow
from services.template_library import BUILTIN_TEMPLATES, seed_templates
from services.template_service import TemplateService
from services.workflow_service import ExecutionService, WorkflowService

WS = "ws-services"


def template_data(id, rating, usage_count, category="Alerts", is_public=True):
    return {
        "id": id,
        "name": f"Template {id}",
        "description": "test template",
        "category": category,
        "template": {
            "trigger": {"type": "EVENT"},
            "conditions": {"field": "level", "operator": "equals", "value": "critical"},
            "actions": [{"type": "send_email", "config": {"to": "ops@example.com"}}],
            "nodes": [{"id": "n1"}],
            "edges": [],
        },
        "is_public": is_public,
        "rating": rating,
        "usage_count": usage_count,
    }


@pytest.mark.unit
class TestWorkflowService:
    @pytest.mark.asyncio
    async def test_create_starts_at_version_one(self, db_session):
        wf = await WorkflowService(db_session).create_workflow(
            workspace_id=WS, name="Orders", trigger={"type": "EVENT"}, actions=[]
        )
        assert wf.version == 1
        assert wf.is_active is True
        assert wf.execution_count == 0
        assert wf.success_count == 0
        assert wf.failure_count == 0
        assert wf.nodes == []

    @pytest.mark.asyncio
    async def test_every_update_bumps_version_by_one(self, db_session):
        service = WorkflowService(db_session)
        wf = await service.create_workflow(workspace_id=WS, name="Orders")

        wf = await service.update_workflow(wf.id, WS, {"name": "Orders v2"})
        assert (wf.name, wf.version) == ("Orders v2", 2)

        wf = await service.update_workflow(wf.id, WS, {})
        assert wf.version == 3

    @pytest.mark.asyncio
    async def test_update_replaces_fields_whole(self, db_session):
        service = WorkflowService(db_session)
        wf = await service.create_workflow(
            workspace_id=WS,
            name="Orders",
            actions=[{"type": "send_email", "config": {"to": "a@b.c"}}],
        )

        wf = await service.update_workflow(wf.id, WS, {"actions": [{"type": "webhook", "config": {}}]})

        assert wf.actions == [{"type": "webhook", "config": {}}]

    @pytest.mark.asyncio
    async def test_update_can_clear_conditions(self, db_session):
        service = WorkflowService(db_session)
        wf = await service.create_workflow(
            workspace_id=WS, name="Orders", conditions={"field": "a", "operator": "equals", "value": 1}
        )

        wf = await service.update_workflow(wf.id, WS, {"conditions": None})

        assert wf.conditions is None

    @pytest.mark.asyncio
    async def test_update_rejects_statistics_fields(self, db_session):
        service = WorkflowService(db_session)
        wf = await service.create_workflow(workspace_id=WS, name="Orders")

        with pytest.raises(ValidationError):
            await service.update_workflow(wf.id, WS, {"execution_count": 99})

    @pytest.mark.asyncio
    async def test_toggle_keeps_version(self, db_session):
        service = WorkflowService(db_session)
        wf = await service.create_workflow(workspace_id=WS, name="Orders")

        wf = await service.toggle_workflow(wf.id, WS, False)
        assert wf.is_active is False
        assert wf.version == 1

        wf = await service.toggle_workflow(wf.id, WS, True)
        assert wf.is_active is True
        assert wf.version == 1

    @pytest.mark.asyncio
    async def test_workspace_isolation(self, db_session):
        service = WorkflowService(db_session)
        wf = await service.create_workflow(workspace_id=WS, name="Orders")
        await service.create_workflow(workspace_id="other", name="Theirs")

        assert [w.id for w in await service.list_workflows(WS)] == [wf.id]
        with pytest.raises(NotFoundError):
            await service.get_workflow(wf.id, "other")
        with pytest.raises(NotFoundError):
            await service.update_workflow(wf.id, "other", {"name": "hijack"})

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session):
        service = WorkflowService(db_session)
        first = await service.create_workflow(workspace_id=WS, name="First")
        second = await service.create_workflow(workspace_id=WS, name="Second")
        first.created_at = datetime.now(timezone.utc) - timedelta(hours=1)
        await db_session.flush()

        assert [w.id for w in await service.list_workflows(WS)] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_delete_removes_executions(self, db_session):
        service = WorkflowService(db_session)
        executions = ExecutionService(db_session)
        wf = await service.create_workflow(workspace_id=WS, name="Orders")
        ex = await executions.create_execution(wf.id, {"a": 1})
        await db_session.commit()

        await service.delete_workflow(wf.id, WS)
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await service.get_workflow(wf.id)
        with pytest.raises(NotFoundError):
            await executions.get_execution(ex.id)

    def test_history_relationships_are_never_lazy_loaded(self):
        # Executions are always fetched through ExecutionService queries
        assert inspect(Workflow).relationships["executions"].lazy == "raise"
        assert inspect(WorkflowExecution).relationships["workflow"].lazy == "raise"

    @pytest.mark.asyncio
    async def test_delete_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            await WorkflowService(db_session).delete_workflow("missing", WS)

    @pytest.mark.asyncio
    async def test_increment_stats_keeps_running_average(self, db_session):
        service = WorkflowService(db_session)
        wf = await service.create_workflow(workspace_id=WS, name="Orders")
        now = datetime.now(timezone.utc)

        assert await service.increment_stats(wf.id, success=True, duration=100, completed_at=now)
        assert await service.increment_stats(wf.id, success=False, duration=300, completed_at=now)
        await db_session.commit()
        await db_session.refresh(wf)

        assert wf.execution_count == 2
        assert wf.success_count == 1
        assert wf.failure_count == 1
        assert wf.average_execution_time == pytest.approx(200.0)

    @pytest.mark.asyncio
    async def test_increment_stats_on_missing_workflow(self, db_session):
        result = await WorkflowService(db_session).increment_stats(
            "missing", success=True, duration=1, completed_at=datetime.now(timezone.utc)
        )
        assert result is False


@pytest.mark.unit
class TestExecutionService:
    @pytest.mark.asyncio
    async def test_new_execution_is_running(self, db_session):
        wf = await WorkflowService(db_session).create_workflow(workspace_id=WS, name="Orders")
        ex = await ExecutionService(db_session).create_execution(wf.id, {"a": 1})

        assert ex.status == ExecutionStatus.RUNNING.value
        assert ex.steps == []
        assert ex.started_at is not None
        assert ex.completed_at is None

    @pytest.mark.asyncio
    async def test_history_is_newest_first_and_limited(self, db_session):
        wf = await WorkflowService(db_session).create_workflow(workspace_id=WS, name="Orders")
        service = ExecutionService(db_session)
        base = datetime.now(timezone.utc)
        created = []
        for n in range(5):
            ex = await service.create_execution(wf.id, {"n": n})
            ex.started_at = base + timedelta(seconds=n)
            created.append(ex.id)
        await db_session.flush()

        history = await service.list_executions(wf.id, limit=3)

        assert [ex.id for ex in history] == list(reversed(created))[:3]

    @pytest.mark.asyncio
    async def test_get_execution_scoped_by_workspace(self, db_session):
        wf = await WorkflowService(db_session).create_workflow(workspace_id=WS, name="Orders")
        ex = await ExecutionService(db_session).create_execution(wf.id, {})

        assert (await ExecutionService(db_session).get_execution(ex.id, WS)).id == ex.id
        with pytest.raises(NotFoundError):
            await ExecutionService(db_session).get_execution(ex.id, "other")

    @pytest.mark.asyncio
    async def test_settle_is_one_way(self, db_session):
        wf = await WorkflowService(db_session).create_workflow(workspace_id=WS, name="Orders")
        service = ExecutionService(db_session)
        ex = await service.create_execution(wf.id, {})
        now = datetime.now(timezone.utc)

        first = await service.settle(ex.id, ExecutionStatus.COMPLETED, [], now, 5)
        second = await service.settle(ex.id, ExecutionStatus.FAILED, [], now, 5, error="late")

        assert (first, second) == (True, False)
        stored = await service.get_execution(ex.id)
        assert stored.status == ExecutionStatus.COMPLETED.value


@pytest.mark.unit
class TestTemplateService:
    @pytest.mark.asyncio
    async def test_list_orders_by_rating_then_usage(self, db_session):
        service = TemplateService(db_session)
        for data in (
            template_data("low", rating=3.0, usage_count=500),
            template_data("top-popular", rating=4.8, usage_count=90),
            template_data("top-niche", rating=4.8, usage_count=10),
            template_data("hidden", rating=5.0, usage_count=1, is_public=False),
        ):
            await service.upsert_template(data)

        templates = await service.list_templates()

        assert [t.id for t in templates] == ["top-popular", "top-niche", "low"]

    @pytest.mark.asyncio
    async def test_list_filters_by_category(self, db_session):
        service = TemplateService(db_session)
        await service.upsert_template(template_data("a", 4.0, 1, category="Alerts"))
        await service.upsert_template(template_data("r", 4.0, 1, category="Reports"))

        assert [t.id for t in await service.list_templates("Reports")] == ["r"]

    @pytest.mark.asyncio
    async def test_get_unknown_template(self, db_session):
        with pytest.raises(NotFoundError):
            await TemplateService(db_session).get_template("missing")

    @pytest.mark.asyncio
    async def test_instantiate_twice(self, db_session):
        service = TemplateService(db_session)
        await service.upsert_template(template_data("tpl", 4.0, 7))

        first = await service.create_workflow_from_template("tpl", WS)
        second = await service.create_workflow_from_template("tpl", WS)
        await db_session.commit()

        template = await service.get_template("tpl")
        await db_session.refresh(template)
        assert template.usage_count == 9
        assert first.id != second.id
        assert first.version == second.version == 1

    @pytest.mark.asyncio
    async def test_instantiate_copies_template_body(self, db_session):
        service = TemplateService(db_session)
        template = await service.upsert_template(template_data("tpl", 4.0, 0))

        wf = await service.create_workflow_from_template("tpl", WS)

        assert wf.workspace_id == WS
        assert wf.name == template.name
        assert wf.actions == template.template["actions"]
        assert wf.conditions == template.template["conditions"]
        assert wf.nodes == [{"id": "n1"}]

        wf.actions[0]["config"]["to"] = "changed@example.com"
        assert template.template["actions"][0]["config"]["to"] == "ops@example.com"

    @pytest.mark.asyncio
    async def test_overrides_replace_whole_fields(self, db_session):
        service = TemplateService(db_session)
        await service.upsert_template(template_data("tpl", 4.0, 0))

        wf = await service.create_workflow_from_template(
            "tpl",
            WS,
            {"name": "My alerts", "actions": [{"type": "slack_message", "config": {"channel": "#me"}}]},
        )

        assert wf.name == "My alerts"
        assert wf.actions == [{"type": "slack_message", "config": {"channel": "#me"}}]
        assert wf.trigger == {"type": "EVENT"}

    @pytest.mark.asyncio
    async def test_instantiate_unknown_template(self, db_session):
        with pytest.raises(NotFoundError):
            await TemplateService(db_session).create_workflow_from_template("missing", WS)

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        await seed_templates(db_session)
        await seed_templates(db_session)

        templates = await TemplateService(db_session).list_templates()
        assert len(templates) == len(BUILTIN_TEMPLATES)
        assert "Critical Alert Notification" in {t.name for t in templates}
