"""
Structured logging for the offline deal import workflow.

structlog renders JSON for log shippers or a console view for operators.
Per-import fields (trace_id, deal_id) are bound through structlog's
contextvars, so every entry emitted while an import runs carries them.

Entries go to stderr; stdout carries only the command's confirmation line.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import Processor


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    # Looked up per logger so a redirected sys.stderr is picked up
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(json_output: bool = False, log_level: str = 'INFO') -> None:
    """
    Configure structlog for the import command.

    Args:
        json_output: Render JSON lines instead of the console format
        log_level: Minimum level name, e.g. "DEBUG" (unknown names mean INFO)
    """
    level_num = logging.getLevelName(log_level.upper())
    if not isinstance(level_num, int):
        level_num = logging.INFO

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def current_context() -> dict[str, Any]:
    """Fields currently bound for the running import."""
    return structlog.contextvars.get_contextvars()


@contextmanager
def logging_context(**fields: str | None) -> Generator[None, None, None]:
    """
    Bind fields to every log entry emitted inside the block.

    ``None`` values are skipped; previous bindings are restored on exit.

    Usage:
        with logging_context(trace_id=uuid4().hex, deal_id=str(identifier)):
            logger.info('import.started')
    """
    bound = {key: value for key, value in fields.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


class StageTimer:
    """Wall-clock durations of the import stages, in milliseconds."""

    def __init__(self):
        self.stages: dict[str, float] = {}
        self._started = time.perf_counter()

    @contextmanager
    def stage(self, name: str) -> Generator[None, None, None]:
        """Time a stage, recording it even when the stage raises."""
        began = time.perf_counter()
        try:
            yield
        finally:
            self.stages[name] = (time.perf_counter() - began) * 1000

    def summary(self) -> dict[str, Any]:
        return {
            'total_ms': round((time.perf_counter() - self._started) * 1000, 2),
            'stages': {name: round(ms, 2) for name, ms in self.stages.items()},
        }


configure_logging()
