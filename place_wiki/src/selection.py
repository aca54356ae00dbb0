"""
Result-panel lifecycle for place selections.

Each selection moves the panel idle -> loading -> ready | empty | error.
A new selection cancels whatever run is still in flight, so only the most
recent selection ever reaches a terminal state.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from place_wiki.config import Config, get_config
from place_wiki.utils.async_utils import with_timeout

from . import tracing
from .models import ArticleSummary, SelectedPlace
from .pool_builder import build_pool

logger = logging.getLogger(__name__)


class PanelStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class PanelState:
    status: PanelStatus = PanelStatus.IDLE
    items: List[ArticleSummary] = field(default_factory=list)
    place: Optional[SelectedPlace] = None

    @property
    def primary(self) -> Optional[ArticleSummary]:
        if self.items and self.items[0].is_primary:
            return self.items[0]
        return None

    def to_dict(self) -> Dict[str, Any]:
        primary = self.primary
        return {
            'status': self.status.value,
            'place': self.place.to_dict() if self.place else None,
            'primary': primary.title if primary else None,
            'count': len(self.items),
            'items': [item.to_dict() for item in self.items],
        }


class SelectionRunner:
    """Runs the pool pipeline for one result panel, last selection wins."""

    def __init__(self, provider, config: Optional[Config] = None, tracer: Optional[tracing.Tracer] = None):
        self.provider = provider
        self.config = config or get_config()
        self.tracer = tracer
        self.state = PanelState()
        self._task: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        if self.busy:
            self._task.cancel()

    async def _run(self, place: SelectedPlace) -> PanelState:
        self.state = PanelState(PanelStatus.LOADING, place=place)
        build = with_timeout(self.config.get_timeout('pipeline'))(build_pool)
        try:
            items = await build(place, self.provider, self.config, self.tracer)
        except Exception:
            logger.exception("Pool build failed for %r", place.name)
            return PanelState(PanelStatus.ERROR, place=place)
        status = PanelStatus.READY if items else PanelStatus.EMPTY
        return PanelState(status, items=list(items), place=place)

    async def select(self, place: SelectedPlace) -> Optional[PanelState]:
        """Run the pipeline for `place`; None if a newer selection replaced it."""
        if self.busy:
            logger.debug("Cancelling in-flight selection for %r", place.name)
            self.cancel()

        task = asyncio.ensure_future(self._run(place))
        self._task = task
        try:
            state = await task
        except asyncio.CancelledError:
            if self._task is not task:
                return None
            # The caller went away: stop the run and free the panel.
            task.cancel()
            self._task = None
            self.state = PanelState(place=place)
            raise

        if self._task is not task:
            return None
        self.state = state
        return state
