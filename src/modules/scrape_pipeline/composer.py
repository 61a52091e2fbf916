import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

C = TypeVar("C")

PipelineStep = Callable[[C], Awaitable[None]]


class PipelineComposer(Generic[C]):
    """Manages an ordered sequence of async steps sharing one run context."""

    def __init__(self) -> None:
        self._steps: list[tuple[str, PipelineStep[C]]] = []

    def add_step(self, name: str, step: PipelineStep[C]) -> None:
        self._steps.append((name, step))

    async def run(self, context: C) -> C:
        logger.info("Pipeline started (%d steps)", len(self._steps))
        for name, step in self._steps:
            logger.info("Running step: %s", name)
            await step(context)
            logger.info("Completed step: %s", name)
        logger.info("Pipeline finished")
        return context
