"""
MotionCare Worker Thread Pool

ThreadPoolExecutor for blocking LLM calls and pose metric computation
without blocking the async event loop.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Any, Optional
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import threading
import uuid

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class Task:
    """Represents a processing task."""
    task_id: str
    func: Callable
    args: tuple = ()
    kwargs: dict = None
    status: TaskStatus = TaskStatus.PENDING
    error: Optional[str] = None
    created_at: datetime = None
    completed_at: datetime = None

    def __post_init__(self):
        if self.kwargs is None:
            self.kwargs = {}
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)


class WorkerPool:
    """
    Thread pool for blocking operations.

    Features:
    - Fixed-size thread pool
    - Async-compatible execution
    - Pending/running task tracking for stats
    """

    def __init__(self, max_workers: int = 4, name: str = "worker_pool"):
        self.max_workers = max_workers
        self.name = name

        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix=f"{name}_"
        )

        # Task tracking
        self._tasks: dict[str, Task] = {}
        self._lock = threading.Lock()

        # Stats
        self._completed_count = 0
        self._failed_count = 0

        logger.info(f"🧵 WorkerPool '{name}' initialized (workers: {self.max_workers})")

    async def submit_async(
        self,
        func: Callable,
        *args,
        task_id: str = None,
        **kwargs
    ) -> Any:
        """
        Run a task on the pool and await its result (async-friendly).

        The task is tracked while pending or running and dropped once it
        finishes. Exceptions raised by the task propagate to the caller.
        """
        task_id = task_id or f"task_{uuid.uuid4().hex[:12]}"

        task = Task(
            task_id=task_id,
            func=func,
            args=args,
            kwargs=kwargs
        )

        with self._lock:
            self._tasks[task_id] = task
            future = self._executor.submit(self._run_task, task)

        logger.debug(f"Task {task_id} submitted to '{self.name}'")

        try:
            return await asyncio.wrap_future(future)
        finally:
            with self._lock:
                self._tasks.pop(task_id, None)

    def _run_task(self, task: Task) -> Any:
        """Execute a task in the thread pool."""
        task.status = TaskStatus.RUNNING

        try:
            result = task.func(*task.args, **task.kwargs)

            task.status = TaskStatus.COMPLETED
            task.completed_at = datetime.now(timezone.utc)

            with self._lock:
                self._completed_count += 1

            logger.debug(f"Task {task.task_id} completed")
            return result

        except Exception as e:
            task.status = TaskStatus.FAILED
            task.error = str(e)
            task.completed_at = datetime.now(timezone.utc)

            with self._lock:
                self._failed_count += 1

            logger.error(f"Task {task.task_id} failed: {type(e).__name__}: {e}")
            raise

    # ========================================
    # Lifecycle
    # ========================================

    def shutdown(self, wait: bool = True):
        """Shutdown the thread pool."""
        logger.info(f"Shutting down WorkerPool '{self.name}'...")
        self._executor.shutdown(wait=wait)
        logger.info(f"WorkerPool '{self.name}' shutdown complete")

    def get_stats(self) -> dict:
        """Get pool statistics."""
        with self._lock:
            tasks = list(self._tasks.values())
        return {
            "name": self.name,
            "max_workers": self.max_workers,
            "pending_tasks": len([t for t in tasks if t.status == TaskStatus.PENDING]),
            "running_tasks": len([t for t in tasks if t.status == TaskStatus.RUNNING]),
            "completed_tasks": self._completed_count,
            "failed_tasks": self._failed_count,
        }
