"""
Ranking and search oracles backed by an OpenAI chat model
"""
import json
import logging
from typing import Any, List, Optional, Protocol

from langsmith import traceable
from openai import AsyncOpenAI

from feed_engine.models.interaction_models import UserInteractions
from feed_engine.models.video_models import VideoProjection, VideoRecord
from feed_engine.services.errors import OracleResponseError, OracleUnavailableError

logger = logging.getLogger(__name__)


class RankingOracle(Protocol):
    async def rank(self, catalog: List[VideoRecord], interactions: UserInteractions) -> List[str]:
        ...


class SearchOracle(Protocol):
    async def search(self, query: str, projection: List[VideoProjection]) -> List[str]:
        ...


def get_openai_client(api_key: Optional[str], timeout: float) -> Optional[AsyncOpenAI]:
    """Get OpenAI client, handling placeholders."""
    if not api_key or "your_" in api_key or api_key == "test-key":
        return None
    return AsyncOpenAI(api_key=api_key, timeout=timeout)


def parse_identifier_list(content: Optional[str]) -> List[str]:
    """
    Parse a model answer into identifiers. Accepts a bare JSON array or an
    object with an "ids" array; string entries are kept, anything else is dropped.
    """
    if not content:
        raise OracleResponseError("Empty oracle response")

    try:
        payload: Any = json.loads(content)
    except ValueError as e:
        raise OracleResponseError(f"Oracle response is not JSON: {str(e)}") from e

    if isinstance(payload, dict):
        payload = payload.get("ids")
    if not isinstance(payload, list):
        raise OracleResponseError("Oracle response does not contain an id list")

    return [item for item in payload if isinstance(item, str)]


class _OpenAIOracle:
    def __init__(self, api_key: Optional[str], model: str = "gpt-4o-mini", timeout: float = 20.0):
        self.model = model
        self.client = get_openai_client(api_key, timeout)

    async def _complete(self, system_prompt: str, user_prompt: str) -> List[str]:
        if self.client is None:
            raise OracleUnavailableError("OPENAI_API_KEY is not configured")

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
            temperature=0.2,
        )
        content = response.choices[0].message.content if response.choices else None
        return parse_identifier_list(content)


class OpenAIRankingOracle(_OpenAIOracle):
    SYSTEM_PROMPT = (
        "You order a video catalog for one viewer. Use what they liked, saved and "
        "watched to put the most relevant videos first and push videos similar to "
        "ones they disliked down. Answer with JSON: {\"ids\": [ordered video ids]}."
    )

    @traceable(name="ranking_oracle")
    async def rank(self, catalog: List[VideoRecord], interactions: UserInteractions) -> List[str]:
        videos = [
            {
                "id": v.id,
                "public_id": v.public_id,
                "title": v.title,
                "category": v.category,
                "type": v.type.value,
            }
            for v in catalog
        ]
        signals = {
            "liked": interactions.liked_ids,
            "disliked": interactions.disliked_ids,
            "saved": interactions.saved_ids,
            "watch_history": [e.model_dump() for e in interactions.watch_history],
        }
        user_prompt = (
            f"Catalog: {json.dumps(videos, ensure_ascii=False)}\n"
            f"Viewer signals: {json.dumps(signals, ensure_ascii=False)}"
        )

        ids = await self._complete(self.SYSTEM_PROMPT, user_prompt)
        logger.info(f"Ranking oracle returned {len(ids)} ids for {len(catalog)} videos")
        return ids


class OpenAISearchOracle(_OpenAIOracle):
    SYSTEM_PROMPT = (
        "You search a video catalog. Work out what the user is looking for and pick "
        "the matching videos, best match first. "
        "Answer with JSON: {\"ids\": [ordered video ids]}."
    )

    @traceable(name="search_oracle")
    async def search(self, query: str, projection: List[VideoProjection]) -> List[str]:
        videos = [p.model_dump() for p in projection]
        user_prompt = (
            f"Videos: {json.dumps(videos, ensure_ascii=False)}\n"
            f"The user is searching for: \"{query}\""
        )

        ids = await self._complete(self.SYSTEM_PROMPT, user_prompt)
        logger.info(f"Search oracle returned {len(ids)} ids for query {query!r}")
        return ids
