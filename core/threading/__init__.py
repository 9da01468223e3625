"""
MotionCare Threading Module
"""

from .worker_pool import (
    WorkerPool,
    Task,
    TaskStatus,
)

__all__ = [
    'WorkerPool',
    'Task',
    'TaskStatus',
]
