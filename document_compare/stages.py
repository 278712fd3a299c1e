"""
Stage Recovery
==============
Runs one comparison stage and converts a failure into that stage's
neutral result, so a single failing sub-comparison cannot blank the
whole report. Failures are logged and reported to the caller through
StageResult, never re-raised.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, List, TypeVar

from config_logging import get_logger

logger = get_logger('document_compare.stages')

T = TypeVar('T')


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """
    Outcome of a stage.

    Attributes:
        stage: Stage name, used in logs and ComparisonResult.stage_failures
        value: The stage output, or the neutral fallback when ok is False
        ok: Whether the stage completed
        error: Failure description ("ExceptionType: message")
    """
    stage: str
    value: T
    ok: bool = True
    error: str = ""


def run_stage(stage: str, func: Callable[..., T], fallback: Callable[[], T],
              *args: Any, **kwargs: Any) -> StageResult[T]:
    """
    Run func(*args, **kwargs); on any exception return fallback().

    Args:
        stage: Stage name for logging
        func: Stage implementation
        fallback: Zero-argument factory for the neutral result
    """
    try:
        return StageResult(stage=stage, value=func(*args, **kwargs))
    except Exception as e:
        error = f"{type(e).__name__}: {e}"
        logger.warning(f"Stage {stage} failed, using neutral result: {error}",
                       stage=stage, exc_info=True)
        return StageResult(stage=stage, value=fallback(), ok=False, error=error)


class StageLog:
    """Collects failed stage names across one comparison."""

    def __init__(self):
        self.failures: List[str] = []

    def run(self, stage: str, func: Callable[..., T], fallback: Callable[[], T],
            *args: Any, **kwargs: Any) -> T:
        result = run_stage(stage, func, fallback, *args, **kwargs)
        if not result.ok:
            self.failures.append(stage)
        return result.value

