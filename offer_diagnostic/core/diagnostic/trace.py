"""Per-stage trace events for one evaluation."""

import logging
import uuid
from typing import Any

from offer_diagnostic.core.diagnostic.types import TraceEvent
from offer_diagnostic.core.logging import get_logger, log_with_context

logger = get_logger(__name__)


class Tracer:
    """Collects one TraceEvent per pipeline stage and mirrors each to the log."""

    def __init__(self, evaluation_id: str | None = None):
        self.evaluation_id = evaluation_id or uuid.uuid4().hex[:12]
        self.events: list[TraceEvent] = []

    def emit(self, stage: str, **detail: Any) -> None:
        self.events.append(TraceEvent(stage=stage, detail=detail))
        log_with_context(
            logger,
            logging.DEBUG,
            f"Stage {stage} complete",
            evaluation_id=self.evaluation_id,
            stage=stage,
            **detail,
        )

    @property
    def stages(self) -> list[str]:
        return [event.stage for event in self.events]
