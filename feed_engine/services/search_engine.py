import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Set, Tuple

from feed_engine.models.video_models import VideoProjection, VideoRecord
from feed_engine.services.errors import OracleResponseError
from feed_engine.services.llm_oracle import SearchOracle

logger = logging.getLogger(__name__)


class SearchPhase(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    QUERYING = "querying"
    RESOLVED = "resolved"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    sequence: int = 0
    phase: SearchPhase = SearchPhase.IDLE
    results: List[VideoRecord] = field(default_factory=list)


def substring_matches(query: str, catalog: Sequence[VideoRecord]) -> List[VideoRecord]:
    """Records whose title or category contains the query, case-insensitively, in catalog order"""
    needle = query.lower()
    return [v for v in catalog if needle in v.title.lower() or needle in v.category.lower()]


class SearchEngine:
    """
    Debounced search over the current feed.

    Each keystroke gets a new sequence number and re-arms the quiet-period timer;
    a pending timer for an earlier keystroke is cancelled. A query whose oracle
    call is already in flight is left to finish, but its result is applied only
    if its sequence number is still the latest one issued.
    """

    def __init__(self, oracle: Optional[SearchOracle],
                 catalog_provider: Callable[[], Sequence[VideoRecord]],
                 debounce_seconds: float = 0.6,
                 oracle_timeout: Optional[float] = None):
        self.oracle = oracle
        self.catalog_provider = catalog_provider
        self.debounce_seconds = debounce_seconds
        self.oracle_timeout = oracle_timeout

        self._sequence = 0
        self._state = SearchState()
        self._pending: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def state(self) -> SearchState:
        return self._state

    def keystroke(self, query: str) -> SearchState:
        """
        Register the latest text in the search box. Must be called from a running event loop.
        """
        seq = self._next_sequence()

        if not query.strip():
            self._state = SearchState(query=query, sequence=seq, phase=SearchPhase.RESOLVED)
            return self._state

        self._state = replace(self._state, query=query, sequence=seq, phase=SearchPhase.DEBOUNCING)
        self._pending = asyncio.get_running_loop().create_task(self._debounce(seq, query))
        return self._state

    async def search_now(self, query: str) -> SearchState:
        """Run a query immediately, superseding anything pending"""
        seq = self._next_sequence()

        if not query.strip():
            self._state = SearchState(query=query, sequence=seq, phase=SearchPhase.RESOLVED)
            return self._state

        return await self._execute(seq, query)

    async def wait_until_settled(self) -> SearchState:
        """Wait for the pending timer and any in-flight queries to finish"""
        while True:
            tasks = [t for t in [self._pending, *self._in_flight] if t is not None and not t.done()]
            if not tasks:
                return self._state
            await asyncio.gather(*tasks, return_exceptions=True)

    def reset(self) -> None:
        """Drop the current session; anything still running is discarded when it resolves"""
        self._next_sequence()
        self._state = SearchState(sequence=self._sequence)

    def _next_sequence(self) -> int:
        pending = self._pending
        if pending is not None and not pending.done():
            if self._state.phase == SearchPhase.DEBOUNCING:
                pending.cancel()
            else:
                self._in_flight.add(pending)
                pending.add_done_callback(self._in_flight.discard)
        self._pending = None

        self._sequence += 1
        return self._sequence

    async def _debounce(self, seq: int, query: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        await self._execute(seq, query)

    async def _execute(self, seq: int, query: str) -> SearchState:
        if seq != self._sequence:
            return self._state

        self._state = replace(self._state, query=query, sequence=seq, phase=SearchPhase.QUERYING)
        catalog = list(self.catalog_provider())
        results, phase = await self._run_query(query, catalog)

        if seq != self._sequence:
            logger.debug(f"Discarding stale search result for {query!r} (seq {seq} < {self._sequence})")
            return self._state

        self._state = SearchState(query=query, sequence=seq, phase=phase, results=results)
        logger.info(f"Search {query!r} resolved with {len(results)} results ({phase.value})")
        return self._state

    async def _run_query(self, query: str, catalog: List[VideoRecord]) -> Tuple[List[VideoRecord], SearchPhase]:
        if self.oracle is None:
            return substring_matches(query, catalog), SearchPhase.FALLBACK

        projection = [VideoProjection(id=v.id, title=v.title, category=v.category) for v in catalog]
        try:
            call = self.oracle.search(query, projection)
            if self.oracle_timeout:
                ids = await asyncio.wait_for(call, timeout=self.oracle_timeout)
            else:
                ids = await call
            if not isinstance(ids, (list, tuple)):
                raise OracleResponseError(f"search oracle returned {type(ids).__name__}")
        except Exception as e:
            logger.warning(f"Search oracle failed for {query!r}, using substring match: {str(e)}")
            return substring_matches(query, catalog), SearchPhase.FALLBACK

        by_id = {}
        for video in catalog:
            by_id.setdefault(video.id, video)

        results = []
        seen = set()
        for identifier in ids:
            video = by_id.get(identifier) if isinstance(identifier, str) else None
            if video is None or video.id in seen:
                continue
            seen.add(video.id)
            results.append(video)
        return results, SearchPhase.RESOLVED
