from typing import List, Optional, Sequence
import logging

from langsmith import traceable

from feed_engine.models.interaction_models import UserInteractions
from feed_engine.models.video_models import VideoRecord
from feed_engine.services.llm_oracle import RankingOracle

logger = logging.getLogger(__name__)


def resolve_identifier(identifier: str, catalog: Sequence[VideoRecord]) -> Optional[VideoRecord]:
    """
    Find the catalog record an oracle identifier refers to, matching either
    the primary id or the public_id alias. First match in catalog order wins.
    """
    for video in catalog:
        if video.id == identifier or (video.public_id and video.public_id == identifier):
            return video
    return None


def compose_feed(catalog: Sequence[VideoRecord], ranked_ids: Optional[Sequence[str]]) -> List[VideoRecord]:
    """
    Merge the oracle order with the full catalog.

    Resolved oracle entries come first in oracle order, then every record whose
    primary id the oracle did not name, in catalog order. Unresolvable ids are
    dropped and an id named twice is placed once.

    The remaining set is computed on primary ids only: a record the oracle named
    through its public_id alias is placed by the oracle AND again in the remainder.
    """
    if not ranked_ids:
        return list(catalog)

    ordered: List[VideoRecord] = []
    placed = set()
    unresolved = 0
    for identifier in ranked_ids:
        video = resolve_identifier(identifier, catalog)
        if video is None:
            unresolved += 1
            continue
        if video.id in placed:
            continue
        placed.add(video.id)
        ordered.append(video)

    if unresolved:
        logger.info(f"Dropped {unresolved} oracle ids not present in the catalog")

    named = set(ranked_ids)
    remaining = [v for v in catalog if v.id not in named]
    return ordered + remaining


@traceable(name="ranking_oracle_call")
async def request_ranking(catalog: List[VideoRecord], interactions: UserInteractions,
                          oracle: Optional[RankingOracle]) -> Optional[List[str]]:
    """
    Ask the ranking oracle for an order. Returns None when the oracle is
    missing, fails or answers with something other than a list of ids.
    """
    if oracle is None:
        return None

    try:
        ranked_ids = await oracle.rank(list(catalog), interactions)
    except Exception as e:
        logger.warning(f"Ranking oracle failed, using catalog order: {str(e)}")
        return None

    if not isinstance(ranked_ids, (list, tuple)):
        logger.warning(f"Ranking oracle returned {type(ranked_ids).__name__}, using catalog order")
        return None
    return [i for i in ranked_ids if isinstance(i, str)]
