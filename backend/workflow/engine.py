"""Workflow Execution Engine: runs one workflow against one trigger payload.

Lifecycle of a run:

    execute(workflow_id, trigger_data)
      ├─ workflow must exist (NotFoundError) and be active (InvalidStateError)
      ├─ persist Execution {status: RUNNING, steps: []} and return it
      └─ spawn an independent task:
           1. evaluate the condition tree once; if not met, log a single
              "condition" step with status "not_met" and complete
           2. dispatch actions in order, one step per action; the first
              failed action stops the sequence and fails the run
           3. settle: write the step log + terminal status, then bump the
              workflow's statistics, in one transaction

Every run task has its own error boundary. Unexpected errors are settled
as FAILED with a generic message and never reach the caller or other runs.
A settlement write that fails is retried once in a fresh session as a
FAILED engine fault with a JSON-safe copy of the step log.
"""

import asyncio
import copy
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import async_sessionmaker

from actions.dispatcher import ActionDispatcher
from core.constants import (
    CONDITION_STEP_KIND,
    ENGINE_FAULT_MESSAGE,
    ExecutionStatus,
    StepStatus,
)
from core.exceptions import InvalidStateError
from db.models.execution import WorkflowExecution
from services.workflow_service import ExecutionService, WorkflowService
from workflow.conditions import evaluate

logger = structlog.get_logger(__name__)


@dataclass
class RunPlan:
    """Immutable copy of what a run needs from the workflow definition."""

    workflow_id: str
    workspace_id: str
    conditions: Optional[dict] = None
    actions: list = field(default_factory=list)


@dataclass
class RunOutcome:
    status: ExecutionStatus
    steps: list
    error: Optional[str] = None
    error_step: Optional[str] = None


class WorkflowEngine:
    """Starts workflow runs and carries them to settlement.

    Args:
        session_factory: async_sessionmaker used for every persistence write
        dispatcher: ActionDispatcher that executes individual actions
    """

    def __init__(self, session_factory: async_sessionmaker, dispatcher: ActionDispatcher):
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of runs not yet settled."""
        return len(self._tasks)

    async def execute(
        self,
        workflow_id: str,
        trigger_data: Any,
        workspace_id: Optional[str] = None,
        retry_count: int = 0,
    ) -> WorkflowExecution:
        """Create a RUNNING execution and start the run in the background.

        Raises:
            NotFoundError: If the workflow does not exist (in the workspace)
            InvalidStateError: If the workflow is inactive
        """
        async with self._session_factory() as session:
            wf = await WorkflowService(session).get_workflow(workflow_id, workspace_id)
            if not wf.is_active:
                raise InvalidStateError("Workflow is not active")

            plan = RunPlan(
                workflow_id=wf.id,
                workspace_id=wf.workspace_id,
                conditions=copy.deepcopy(wf.conditions),
                actions=copy.deepcopy(wf.actions or []),
            )
            execution = await ExecutionService(session).create_execution(
                workflow_id=wf.id,
                trigger_data=copy.deepcopy(trigger_data),
                retry_count=retry_count,
            )
            await session.commit()

        task = asyncio.create_task(
            self._run(plan, execution.id, execution.started_at, copy.deepcopy(trigger_data)),
            name=f"workflow-run-{execution.id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.info("Execution started", execution_id=execution.id, workflow_id=wf.id)
        return execution

    async def retry(self, execution_id: str, workspace_id: Optional[str] = None) -> WorkflowExecution:
        """Re-run a FAILED execution's payload as a brand-new execution.

        Raises:
            NotFoundError: If the execution does not exist (in the workspace)
            InvalidStateError: If the execution is not FAILED
        """
        async with self._session_factory() as session:
            original = await ExecutionService(session).get_execution(execution_id, workspace_id)
            if original.status != ExecutionStatus.FAILED.value:
                raise InvalidStateError("Can only retry failed executions")
            workflow_id = original.workflow_id
            trigger_data = copy.deepcopy(original.trigger_data)
            retry_count = original.retry_count + 1

        logger.info("Retrying execution", execution_id=execution_id, retry_count=retry_count)
        return await self.execute(workflow_id, trigger_data, workspace_id, retry_count=retry_count)

    async def drain(self) -> None:
        """Wait until every spawned run has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ─── Run task ──────────────────────────────────────────

    async def _run(
        self,
        plan: RunPlan,
        execution_id: str,
        started_at: Optional[datetime],
        trigger_data: Any,
    ) -> None:
        structlog.contextvars.bind_contextvars(
            execution_id=execution_id,
            workflow_id=plan.workflow_id,
        )
        started_at = _as_utc(started_at) or datetime.now(timezone.utc)
        steps: list = []

        try:
            outcome = await self._run_body(plan, trigger_data, steps)
        except Exception:
            logger.exception("Workflow run crashed")
            outcome = RunOutcome(
                status=ExecutionStatus.FAILED,
                steps=steps,
                error=ENGINE_FAULT_MESSAGE,
            )

        await self._settle(plan, execution_id, started_at, outcome)

    async def _run_body(self, plan: RunPlan, trigger_data: Any, steps: list) -> RunOutcome:
        if plan.conditions and not evaluate(plan.conditions, trigger_data):
            steps.append({"kind": CONDITION_STEP_KIND, "status": StepStatus.NOT_MET.value})
            logger.info("Conditions not met")
            return RunOutcome(status=ExecutionStatus.COMPLETED, steps=steps)

        for action in plan.actions:
            result = await self._dispatcher.dispatch(action, trigger_data, plan.workspace_id)
            steps.append(result.to_step())
            if not result.success:
                return RunOutcome(
                    status=ExecutionStatus.FAILED,
                    steps=steps,
                    error=result.error,
                    error_step=result.action_type,
                )

        return RunOutcome(status=ExecutionStatus.COMPLETED, steps=steps)

    async def _settle(
        self,
        plan: RunPlan,
        execution_id: str,
        started_at: datetime,
        outcome: RunOutcome,
    ) -> None:
        completed_at = datetime.now(timezone.utc)
        duration = max(0, int((completed_at - started_at).total_seconds() * 1000))

        try:
            settled = await self._persist(plan, execution_id, outcome, completed_at, duration)
        except Exception:
            logger.exception("Failed to persist execution settlement")
            outcome = RunOutcome(
                status=ExecutionStatus.FAILED,
                steps=_json_safe(outcome.steps),
                error=ENGINE_FAULT_MESSAGE,
                error_step=outcome.error_step,
            )
            try:
                settled = await self._persist(plan, execution_id, outcome, completed_at, duration)
            except Exception:
                logger.exception("Fallback settlement failed, execution left RUNNING")
                return

        if not settled:
            logger.warning("Execution vanished or was already settled")
            return

        logger.info(
            "Execution settled",
            status=outcome.status.value,
            steps=len(outcome.steps),
            duration_ms=duration,
        )

    async def _persist(
        self,
        plan: RunPlan,
        execution_id: str,
        outcome: RunOutcome,
        completed_at: datetime,
        duration: int,
    ) -> bool:
        """Write the settlement and the stats bump in one transaction.

        The session rolls back on close if anything raises before commit.
        """
        async with self._session_factory() as session:
            settled = await ExecutionService(session).settle(
                execution_id=execution_id,
                status=outcome.status,
                steps=outcome.steps,
                completed_at=completed_at,
                duration=duration,
                error=outcome.error,
                error_step=outcome.error_step,
            )
            if settled:
                await WorkflowService(session).increment_stats(
                    workflow_id=plan.workflow_id,
                    success=outcome.status == ExecutionStatus.COMPLETED,
                    duration=duration,
                    completed_at=completed_at,
                )
            await session.commit()
        return settled


def _json_safe(steps: list) -> list:
    # Collaborator outputs may hold values the JSON column cannot store
    try:
        return json.loads(json.dumps(steps, default=str))
    except (TypeError, ValueError):
        return []


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
