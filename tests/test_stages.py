"""Tests for the stage runner."""

from __future__ import annotations

import asyncio

import pytest

from quizzer.errors import QuizzerError, StageNotFoundError
from quizzer.stages import StageRunner


class _Flow:
    def __init__(self) -> None:
        self.log: list[str] = []
        self.runner = StageRunner(self)
        self.stages = {
            "intro": self.intro,
            "middle": self.middle,
            "finish": self.finish,
        }

    async def intro(self) -> None:
        self.log.append("intro")
        await asyncio.sleep(0)
        self.runner.run_stage("middle")

    def middle(self) -> None:
        self.log.append("middle")
        self.runner.run_stage("finish")

    async def finish(self) -> None:
        self.log.append("finish")
        self.runner.end()


class TestStageRunner:
    @pytest.mark.asyncio
    async def test_stages_run_in_order_until_end(self) -> None:
        flow = _Flow()
        await flow.runner.start()
        assert flow.log == ["intro", "middle", "finish"]
        assert not flow.runner.running

    @pytest.mark.asyncio
    async def test_long_chains_do_not_recurse(self) -> None:
        class Loop:
            def __init__(self) -> None:
                self.count = 0
                self.runner = StageRunner(self)
                self.stages = {"tick": self.tick}

            async def tick(self) -> None:
                self.count += 1
                if self.count == 2000:
                    self.runner.end()
                else:
                    self.runner.run_stage("tick")

        loop = Loop()
        await loop.runner.start()
        assert loop.count == 2000

    @pytest.mark.asyncio
    async def test_missing_stage_aborts_the_flow(self) -> None:
        class Broken:
            def __init__(self) -> None:
                self.runner = StageRunner(self)
                self.stages = {"first": self.first}

            async def first(self) -> None:
                self.runner.run_stage("nowhere")

        with pytest.raises(StageNotFoundError) as exc_info:
            await Broken().runner.start()
        assert exc_info.value.stage == "nowhere"
        assert str(exc_info.value) == "Stage 'nowhere' does not exist"

    @pytest.mark.asyncio
    async def test_stage_errors_propagate(self) -> None:
        class Failing:
            def __init__(self) -> None:
                self.runner = StageRunner(self)
                self.stages = {"first": self.first}

            async def first(self) -> None:
                raise ValueError("bad answer")

        with pytest.raises(ValueError, match="bad answer"):
            await Failing().runner.start()

    @pytest.mark.asyncio
    async def test_start_waits_for_end(self) -> None:
        class Deferred:
            def __init__(self) -> None:
                self.ended = False
                self.runner = StageRunner(self)
                self.stages = {"only": self.only}

            def only(self) -> None:
                asyncio.get_running_loop().call_later(0.05, self.finish)

            def finish(self) -> None:
                self.ended = True
                self.runner.end()

        deferred = Deferred()
        await asyncio.wait_for(deferred.runner.start(), timeout=1)
        assert deferred.ended

    @pytest.mark.asyncio
    async def test_finished_stages_without_end_keep_waiting(self) -> None:
        class Quiet:
            def __init__(self) -> None:
                self.ran = False
                self.runner = StageRunner(self)
                self.stages = {"only": self.only}

            async def only(self) -> None:
                self.ran = True

        quiet = Quiet()
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(quiet.runner.start(), timeout=0.1)
        assert quiet.ran
        assert not quiet.runner.running

    @pytest.mark.asyncio
    async def test_plain_first_stage(self) -> None:
        class Sync:
            def __init__(self) -> None:
                self.runner = StageRunner(self)
                self.stages = {"only": lambda: self.runner.end()}

        await asyncio.wait_for(Sync().runner.start(), timeout=1)

    @pytest.mark.asyncio
    async def test_host_without_stages(self) -> None:
        class Empty:
            stages: dict = {}

        with pytest.raises(QuizzerError):
            await StageRunner(Empty()).start()
