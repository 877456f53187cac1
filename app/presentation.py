"""
Orchestration for the task list UI, independent of rendering.

TaskBoard keeps a local mirror of the task list and reconciles it with the
repository after every mutation: the change is applied locally first, the
repository call is issued, and the list is refetched so whatever the
database holds wins. Each optimistic change is tracked as a Mutation that
ends CONFIRMED or REVERTED.
"""

import enum
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional, Protocol

from .errors import NotFoundError, TaskTrackerError
from .models import Priority
from .schemas import Suggestion

logger = logging.getLogger(__name__)


class LoadState(str, enum.Enum):
    LOADING = "loading"
    READY = "ready"


class AddState(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class AIState(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    RESOLVED = "resolved"


class MutationState(str, enum.Enum):
    OPTIMISTIC = "optimistic"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


@dataclass(frozen=True)
class TaskView:
    """Local copy of a task row"""

    id: str
    title: str
    completed: bool
    priority: Priority
    created_at: datetime

    @classmethod
    def from_record(cls, record) -> "TaskView":
        return cls(
            id=record.id,
            title=record.title,
            completed=record.completed,
            priority=Priority(record.priority),
            created_at=record.created_at,
        )


@dataclass
class Mutation:
    kind: str  # toggle, delete, rename
    task_id: str
    state: MutationState = MutationState.OPTIMISTIC
    error: Optional[str] = None


class TaskGateway(Protocol):
    async def list(self) -> list: ...

    async def create(self, title: str, priority: Priority = Priority.LOW): ...

    async def set_completed(self, task_id: str, completed: bool): ...

    async def update_title(self, task_id: str, title: str): ...

    async def delete(self, task_id: str) -> None: ...


class SuggestionProvider(Protocol):
    async def suggest(self, task_title: str) -> Suggestion: ...


class TaskBoard:
    def __init__(
        self,
        tasks: TaskGateway,
        suggestions: SuggestionProvider,
        max_mutations: int = 50,
    ):
        self.tasks_gateway = tasks
        self.suggestions = suggestions
        self.max_mutations = max_mutations

        self.tasks: List[TaskView] = []
        self.load_state = LoadState.LOADING
        self.add_state = AddState.IDLE
        self.ai_state = AIState.IDLE
        self.ai_task_id: Optional[str] = None
        self.suggestion: Optional[Suggestion] = None
        self.mutations: List[Mutation] = []

    @property
    def completed_count(self) -> int:
        return sum(1 for task in self.tasks if task.completed)

    @property
    def total_count(self) -> int:
        return len(self.tasks)

    def get(self, task_id: str) -> Optional[TaskView]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    async def load(self) -> None:
        """Initial fetch; moves the board from LOADING to READY"""
        if self.load_state is LoadState.READY:
            return
        await self.refresh()

    async def refresh(self) -> None:
        """Replace the local list with the authoritative one"""
        try:
            records = await self.tasks_gateway.list()
            self.tasks = [TaskView.from_record(record) for record in records]
        except Exception as e:
            logger.error("Fetch error: %s", e)
        finally:
            self.load_state = LoadState.READY

    async def add(self, title: str, priority: Priority = Priority.LOW) -> Optional[TaskView]:
        if not (title or "").strip() or self.add_state is AddState.SUBMITTING:
            return None

        self.add_state = AddState.SUBMITTING
        try:
            record = await self.tasks_gateway.create(title, priority)
            return TaskView.from_record(record)
        except TaskTrackerError as e:
            logger.error("Add error: %s", e)
            return None
        finally:
            await self.refresh()
            self.add_state = AddState.IDLE

    async def toggle(self, task_id: str) -> Mutation:
        task = self.get(task_id)
        # An unknown id still goes to the repository so the refetch settles it.
        completed = not task.completed if task else True
        self._apply(task_id, lambda t: replace(t, completed=completed))
        return await self._reconcile(
            Mutation("toggle", task_id),
            self.tasks_gateway.set_completed(task_id, completed),
        )

    async def rename(self, task_id: str, title: str) -> Mutation:
        new_title = (title or "").strip()
        if new_title:
            self._apply(task_id, lambda t: replace(t, title=new_title))
        return await self._reconcile(
            Mutation("rename", task_id),
            self.tasks_gateway.update_title(task_id, title),
        )

    async def delete(self, task_id: str) -> Mutation:
        self.tasks = [task for task in self.tasks if task.id != task_id]
        return await self._reconcile(
            Mutation("delete", task_id),
            self.tasks_gateway.delete(task_id),
            not_found_ok=True,
        )

    async def request_suggestion(self, task_id: str) -> Optional[Suggestion]:
        """
        Ask for a suggestion for one task.

        Ignored while another request is pending. The result is dropped if
        its task left the list before it arrived.
        """
        if self.ai_state is AIState.PENDING:
            return None
        task = self.get(task_id)
        if task is None:
            return None

        self.ai_state = AIState.PENDING
        self.ai_task_id = task_id
        self.suggestion = None
        try:
            result = await self.suggestions.suggest(task.title)
        except Exception as e:
            logger.error("AI service error: %s", e)
            result = None

        if result is None or self.get(task_id) is None:
            self.ai_state = AIState.IDLE
            self.ai_task_id = None
            return None

        self.suggestion = result
        self.ai_state = AIState.RESOLVED
        return result

    def dismiss_suggestion(self) -> None:
        if self.ai_state is AIState.PENDING:
            return
        self.suggestion = None
        self.ai_task_id = None
        self.ai_state = AIState.IDLE

    def _apply(self, task_id: str, change) -> None:
        self.tasks = [change(task) if task.id == task_id else task for task in self.tasks]

    async def _reconcile(self, mutation: Mutation, call, not_found_ok: bool = False) -> Mutation:
        self.mutations.append(mutation)
        # Keep only recent mutations
        if len(self.mutations) > self.max_mutations:
            self.mutations = self.mutations[-self.max_mutations:]
        try:
            await call
            mutation.state = MutationState.CONFIRMED
        except NotFoundError as e:
            if not_found_ok:
                logger.info("%s of %s: already gone", mutation.kind, mutation.task_id)
                mutation.state = MutationState.CONFIRMED
            else:
                logger.error("%s error: %s", mutation.kind.capitalize(), e)
                mutation.state = MutationState.REVERTED
                mutation.error = str(e)
        except TaskTrackerError as e:
            logger.error("%s error: %s", mutation.kind.capitalize(), e)
            mutation.state = MutationState.REVERTED
            mutation.error = str(e)
        await self.refresh()
        # Keep the panel only while its task is still listed
        if self.ai_task_id is not None and self.get(self.ai_task_id) is None:
            if self.ai_state is not AIState.PENDING:
                self.dismiss_suggestion()
        return mutation
