import json
import logging
import math
from typing import Optional

from pydantic import ValidationError

from feed_engine.database.kv_store import KeyValueStore
from feed_engine.models.interaction_models import UserInteractions, WatchHistoryEntry

logger = logging.getLogger(__name__)


class InteractionStore:
    """
    Owns the single UserInteractions aggregate.

    Every mutation is applied to the in-memory aggregate and then the whole
    aggregate is written to the key/value store under one key. Nothing else
    writes interaction state.
    """

    def __init__(self, kv_store: KeyValueStore, key: str = "al-hadiqa-interactions-v5"):
        self.kv_store = kv_store
        self.key = key
        self._state = self.load()

    @property
    def state(self) -> UserInteractions:
        """A copy of the current aggregate"""
        return self._state.model_copy(deep=True)

    def load(self) -> UserInteractions:
        """
        Read the persisted aggregate. Missing or malformed data yields the empty aggregate.
        """
        try:
            raw = self.kv_store.get(self.key)
        except Exception as e:
            logger.error(f"Error reading interactions from store: {str(e)}")
            return UserInteractions()

        if not raw:
            return UserInteractions()

        try:
            state = UserInteractions.model_validate(json.loads(raw))
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Stored interactions are malformed, starting empty: {str(e)}")
            return UserInteractions()

        return self._normalize(state)

    def save(self, state: Optional[UserInteractions] = None) -> bool:
        """Write the full aggregate; failures are logged and reported as False"""
        if state is not None:
            self._state = state.model_copy(deep=True)
        try:
            self.kv_store.set(self.key, self._state.model_dump_json(by_alias=True))
            return True
        except Exception as e:
            logger.error(f"Error persisting interactions: {str(e)}")
            return False

    def like(self, video_id: str) -> UserInteractions:
        if video_id in self._state.liked_ids:
            return self.state

        self._state.liked_ids.append(video_id)
        self._state.disliked_ids = [x for x in self._state.disliked_ids if x != video_id]
        self.save()
        return self.state

    def dislike(self, video_id: str) -> UserInteractions:
        if video_id not in self._state.disliked_ids:
            self._state.disliked_ids.append(video_id)
        self._state.liked_ids = [x for x in self._state.liked_ids if x != video_id]
        self.save()
        return self.state

    def restore(self, video_id: str) -> UserInteractions:
        """Un-hide a previously disliked video"""
        self._state.disliked_ids = [x for x in self._state.disliked_ids if x != video_id]
        self.save()
        return self.state

    def save_bookmark(self, video_id: str) -> UserInteractions:
        if video_id in self._state.saved_ids:
            return self.state

        self._state.saved_ids.append(video_id)
        self.save()
        return self.state

    def record_progress(self, video_id: str, progress: float) -> UserInteractions:
        """
        Upsert a watch-history entry. Stored progress only ever increases.
        """
        if progress is None or math.isnan(progress):
            logger.warning(f"Ignoring invalid progress for {video_id}: {progress}")
            return self.state
        progress = min(max(float(progress), 0.0), 1.0)

        for entry in self._state.watch_history:
            if entry.id == video_id:
                if progress > entry.progress:
                    entry.progress = progress
                    self.save()
                return self.state

        self._state.watch_history.append(WatchHistoryEntry(id=video_id, progress=progress))
        self.save()
        return self.state

    def reset(self) -> UserInteractions:
        self._state = UserInteractions()
        self.save()
        return self.state

    def _normalize(self, state: UserInteractions) -> UserInteractions:
        # Collapse duplicates that older writers may have left behind
        state.liked_ids = list(dict.fromkeys(state.liked_ids))
        state.disliked_ids = list(dict.fromkeys(state.disliked_ids))
        state.saved_ids = list(dict.fromkeys(state.saved_ids))

        disliked = set(state.disliked_ids)
        state.liked_ids = [x for x in state.liked_ids if x not in disliked]

        merged = {}
        for entry in state.watch_history:
            current = merged.get(entry.id)
            if current is None:
                merged[entry.id] = entry
            elif entry.progress > current.progress:
                current.progress = entry.progress
        state.watch_history = list(merged.values())
        return state
