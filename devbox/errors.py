"""Exceptions shared by the pipeline stages."""

from __future__ import annotations

from devbox.utils import STAGE_NAMES


class StageError(Exception):
    """Raised when a pipeline stage fails irrecoverably."""

    def __init__(self, stage: int, message: str) -> None:
        self.stage = stage
        self.message = message
        super().__init__(f"Stage {stage} ({STAGE_NAMES.get(stage, '?')}): {message}")
