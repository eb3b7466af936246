"""Display model for the project leaderboard widget."""
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from agriportal.core.config import settings
from agriportal.portal.api_client import PortalClient

logger = logging.getLogger(__name__)

MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}
EMPTY_MESSAGE = "Chưa có dự án nào được đánh giá"


def rank_label(rank: int) -> str:
    return MEDALS.get(rank, f"#{rank}")


def progress_bar_width(value: float | None) -> float:
    """Progress is shown unclamped as text but the bar never overflows"""
    if not value or value < 0:
        return 0.0
    return float(min(value, 100))


def leaderboard_header(count: int) -> str:
    return f"Top {count} dự án được đánh giá cao nhất"


@dataclass
class LeaderboardRow:
    rank: int
    label: str
    project_id: int
    title: str
    creator_username: Optional[str]
    avg_rating: float
    total_ratings: int
    funding_progress: float
    bar_width: float
    rating_score: float


@dataclass
class LeaderboardView:
    rows: list[LeaderboardRow] = field(default_factory=list)
    header: str = ""
    empty_message: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.rows and self.error is None


def build_leaderboard_view(projects: list[dict[str, Any]] | None, error: str | None = None) -> LeaderboardView:
    # Rows keep the server order; rank is only the position in that order
    if error:
        return LeaderboardView(error=error)
    rows = [
        LeaderboardRow(
            rank=index + 1,
            label=rank_label(index + 1),
            project_id=p["project_id"],
            title=p["title"],
            creator_username=p.get("creator_username"),
            avg_rating=p.get("avg_rating", 0.0),
            total_ratings=p.get("total_ratings", 0),
            funding_progress=p.get("funding_progress", 0.0),
            bar_width=progress_bar_width(p.get("funding_progress")),
            rating_score=p.get("rating_score", 0.0),
        )
        for index, p in enumerate(projects or [])
    ]
    if not rows:
        return LeaderboardView(empty_message=EMPTY_MESSAGE)
    return LeaderboardView(rows=rows, header=leaderboard_header(len(rows)))


class LeaderboardWidget:
    def __init__(self, client: PortalClient):
        self.client = client
        self.loading = False
        self.view = LeaderboardView()

    async def load(self, limit: int = settings.LEADERBOARD_DEFAULT_LIMIT) -> LeaderboardView:
        self.loading = True
        try:
            result = await self.client.get_leaderboard(limit)
        finally:
            self.loading = False
        if not result.ok:
            logger.info("Leaderboard unavailable: %s", result.error)
        self.view = build_leaderboard_view(result.data, result.error)
        return self.view
