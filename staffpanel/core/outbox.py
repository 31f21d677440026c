"""Post-commit side effects (emails, live broadcasts) for the current request."""

import inspect
import logging
from typing import Any, Callable

from fastapi import BackgroundTasks

logger = logging.getLogger(__name__)


async def _run_isolated(effect: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    try:
        result = effect(*args, **kwargs)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("Post-commit effect %s failed", getattr(effect, "__name__", effect))


class Outbox:
    """Queue of effects that run after the response has been produced.

    Only add effects after the primary write has committed. A failing effect is
    logged and never reaches the caller or touches the committed data.
    """

    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._tasks = background_tasks

    def add(self, effect: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self._tasks.add_task(_run_isolated, effect, *args, **kwargs)


def get_outbox(background_tasks: BackgroundTasks) -> Outbox:
    return Outbox(background_tasks)
