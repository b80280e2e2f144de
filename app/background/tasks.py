# app/background/tasks.py
"""
Post-response work for the API.

Jobs run in-process after the response has been sent, so a failure can no
longer reach the client. `enqueue_task` wraps every job to log how long it took
and to log (not raise) anything it throws.
"""

import logging
import time
from typing import Any, Callable

from fastapi import BackgroundTasks

logger = logging.getLogger(__name__)


def _task_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


def run_logged(func: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
    """
    Run one job; True when it completed, False when it raised.
    """
    name = _task_name(func)
    start = time.perf_counter()
    try:
        func(*args, **kwargs)
    except Exception:
        logger.exception("Non-fatal: background task %s failed", name)
        return False
    logger.info("Background task %s finished in %.0fms", name, (time.perf_counter() - start) * 1000)
    return True


def enqueue_task(
    background_tasks: BackgroundTasks,
    func: Callable[..., Any],
    *args: Any,
    **kwargs: Any,
) -> None:
    """
    Queue `func(*args, **kwargs)` to run after the response.

    Usage in endpoints:
        enqueue_task(background_tasks, dispatch_appointment_created, appointment.id, session_factory)
    """
    logger.debug("Queued background task %s", _task_name(func))
    background_tasks.add_task(run_logged, func, *args, **kwargs)
