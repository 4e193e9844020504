"""Detached background jobs for webhook-triggered processing."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from fastapi import BackgroundTasks

logger = logging.getLogger(__name__)


def run_background_job(name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Run ``func`` as a detached job. Failures end the job and are logged; nothing is retried."""
    started = time.perf_counter()
    logger.info(f"Background job '{name}' started")
    try:
        func(*args, **kwargs)
    except Exception:
        logger.exception(f"Background job '{name}' failed")
        return
    logger.info(f"Background job '{name}' finished in {time.perf_counter() - started:.2f}s")


def submit_job(background_tasks: BackgroundTasks, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Queue ``func`` to run after the HTTP response has been sent."""
    background_tasks.add_task(run_background_job, name, func, *args, **kwargs)
    logger.debug(f"Background job '{name}' submitted")
