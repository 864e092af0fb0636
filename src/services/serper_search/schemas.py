from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """A single organic search hit"""

    title: str
    link: str
    snippet: str = ""
    position: int | None = None
    hostname: str = ""
    provider: str = "serper"

    @classmethod
    def from_organic(cls, item: dict[str, Any]) -> "SearchHit | None":
        """Build a hit from one Serper `organic` entry; entries without a link or title are skipped."""
        link = item.get("link")
        title = (item.get("title") or "").strip()
        if not link or not title:
            return None
        return cls(
            title=title,
            link=link,
            snippet=(item.get("snippet") or "").strip(),
            position=item.get("position"),
            hostname=(urlsplit(link).hostname or "").lower(),
        )

    @property
    def mentions_contact(self) -> bool:
        text = f"{self.title} {self.snippet}".lower()
        return "@" in text or "email" in text or "contact" in text


class SearchResult(BaseModel):
    """A search result from Serper"""

    query: str
    success: bool = False
    hits: list[SearchHit] = Field(default_factory=list)
    credits_used: int | None = None
    error: str | None = None
