"""Score submission and the per-section leaderboard."""
import logging
from typing import Dict, Iterable, List

from database import UserStore
from errors import UserNotFoundError
from models import LeaderboardEntry, SubmitRequest
from questions import grade

logger = logging.getLogger(__name__)


def resolve_score(body: SubmitRequest, trust_client_score: bool = True) -> int:
    """Client-supplied score if allowed and present, else grade `answers` here."""
    if trust_client_score and body.score is not None:
        return body.score
    return grade(body.answers)


async def submit(store: UserStore, body: SubmitRequest, trust_client_score: bool = True) -> int:
    if await store.find_user(body.username) is None:
        raise UserNotFoundError(body.username)

    score = resolve_score(body, trust_client_score)
    best = await store.raise_best_score(body.username, body.section, score)
    if best is None:
        raise UserNotFoundError(body.username)
    logger.info(
        f"Submitted score {score}, best {best}",
        extra={"username": body.username, "section": body.section},
    )
    return best


def _section_score(row: Dict, section: str):
    value = (row.get("scores") or {}).get(section)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def build_leaderboard(rows: Iterable[Dict], section: str) -> List[LeaderboardEntry]:
    # Legacy records may lack a username; those are not ranked
    entries = [
        LeaderboardEntry(username=row["username"], score=_section_score(row, section))
        for row in rows
        if isinstance(row.get("username"), str)
    ]
    # sorted() is stable: equal scores keep fetch order
    return sorted(entries, key=lambda e: e.score, reverse=True)
