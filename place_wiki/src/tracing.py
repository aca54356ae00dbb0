"""
Optional observability hooks for the resolution pipeline.

The resolver and pool builder call `tracer(event, **fields)` at fixed
checkpoints instead of logging inline. A tracer is any callable with that
signature; exceptions raised by a tracer are logged and swallowed so an
observer can never break a resolution run.
"""
import logging
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

CANDIDATE_TRIED = "candidate_tried"
CANDIDATE_ACCEPTED = "candidate_accepted"
CANDIDATE_REJECTED = "candidate_rejected"
PRIMARY_RESOLVED = "primary_resolved"
POOL_STAGE = "pool_stage"
POI_DISCARDED = "poi_discarded"
POOL_BUILT = "pool_built"

Tracer = Callable[..., None]


def null_tracer(event: str, **fields: Any) -> None:
    return None


class LoggingTracer:
    """Writes every checkpoint to a logger at DEBUG."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.log = log or logging.getLogger("place_wiki.trace")
        self.level = level

    def __call__(self, event: str, **fields: Any) -> None:
        if self.log.isEnabledFor(self.level):
            details = " ".join(f"{k}={v!r}" for k, v in sorted(fields.items()))
            self.log.log(self.level, "%s %s", event, details)


class CompositeTracer:
    """Fan one checkpoint out to several tracers."""

    def __init__(self, tracers: Iterable[Tracer]):
        self.tracers = [t for t in tracers if t is not None]

    def __call__(self, event: str, **fields: Any) -> None:
        for tracer in self.tracers:
            tracer(event, **fields)


class RecordingTracer:
    """Keeps (event, fields) tuples in memory; used by tests and debugging."""

    def __init__(self):
        self.events = []

    def __call__(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def of(self, event: str) -> list:
        return [fields for name, fields in self.events if name == event]


def safe_tracer(tracer: Optional[Tracer]) -> Tracer:
    """Wrap a tracer so its failures are logged, not raised."""
    if tracer is None:
        return null_tracer

    def _emit(event: str, **fields: Any) -> None:
        try:
            tracer(event, **fields)
        except Exception:
            logger.exception("tracer failed on %s", event)

    return _emit
