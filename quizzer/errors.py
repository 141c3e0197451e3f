"""Exceptions raised by quizzer.

Validation failures and multiselect constraint violations are not here on
purpose: they are shown to the user and the prompt asks again. User
cancellation is not an error either; prompts resolve a sentinel instead.
"""

from __future__ import annotations

__all__ = ["QuizzerError", "StageNotFoundError", "SurfaceBusyError"]


class QuizzerError(Exception):
    """Base class for quizzer errors."""


class StageNotFoundError(QuizzerError, KeyError):
    """A stage name is missing from the host's stage table.

    This is a programming error in the host, so the running flow is aborted.
    """

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Stage {stage!r} does not exist")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class SurfaceBusyError(QuizzerError, RuntimeError):
    """A prompt tried to take the input surface while another one holds it."""
