"""Stage runner for step-based flows.

A host object exposes `stages`, an ordered mapping of stage name to a
zero-argument callable. Stages move the flow along by calling
`runner.run_stage(name)` and finish it with `runner.end()`:

    class Quiz:
        def __init__(self):
            self.q = Questioner()
            self.runner = StageRunner(self)
            self.stages = {"ask": self.ask, "done": self.done}

        async def ask(self):
            self.name = await self.q.input(message="Name?")
            self.runner.run_stage("done")

        def done(self):
            self.runner.end()

    await Quiz().runner.start()

Coroutine stages run as tasks, so a chain of stages never grows the call
stack. The first exception raised by any stage aborts the flow and is
re-raised from start(). Finishing every stage without calling end()
leaves start() waiting.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Mapping, Protocol

from .errors import QuizzerError, StageNotFoundError

_logging = logging.getLogger(__name__)

__all__ = ["StageHost", "StageRunner"]


class StageHost(Protocol):
    stages: Mapping[str, Callable[[], Any]]


class StageRunner:
    def __init__(self, host: StageHost) -> None:
        self.host = host
        self._done: asyncio.Future[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def running(self) -> bool:
        return self._done is not None and not self._done.done()

    async def start(self) -> None:
        """Run the first stage and wait until some stage calls end()."""
        stages = self.host.stages
        if not stages:
            raise QuizzerError("Host has no stages")

        self._done = asyncio.get_running_loop().create_future()
        try:
            self.run_stage(next(iter(stages)))
            await self._done
        finally:
            for task in list(self._tasks):
                task.cancel()
            self._tasks.clear()
            self._done = None

    def end(self) -> None:
        """Mark the flow as complete; start() returns."""
        if self._done is not None and not self._done.done():
            _logging.debug("Stage flow ended")
            self._done.set_result(None)

    def run_stage(self, name: str) -> asyncio.Task[Any] | None:
        """Run a stage by name.

        Coroutine stages are scheduled and their task returned; plain
        stages run immediately and return None.
        """
        stages = self.host.stages
        if name not in stages:
            raise StageNotFoundError(name)

        _logging.debug("Running stage %r", name)
        result = stages[name]()
        if not inspect.isawaitable(result):
            return None

        task = asyncio.ensure_future(result)
        self._tasks.add(task)
        task.add_done_callback(self._on_stage_done)
        return task

    def _on_stage_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and self._done is not None and not self._done.done():
            _logging.debug("Stage failed: %r", exc)
            self._done.set_exception(exc)
