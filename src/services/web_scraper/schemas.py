from enum import Enum

from pydantic import BaseModel


class ScrapeStrategy(Enum):
    REQUESTS = "requests"
    PLAYWRIGHT = "playwright"
    AUTO = "auto"  # headless browser first, fallback to plain HTTP GET


class ScrapeResult(BaseModel):
    ok: bool
    final_url: str | None = None
    status_code: int | None = None
    content_type: str | None = None
    method: str | None = None
    title: str | None = None
    meta_description: str | None = None
    text: str | None = None
    contact_text: str | None = None
    word_count: int = 0
    error: str | None = None
    raw_html: str | None = None

    def to_prompt_text(self, max_chars: int = 15_000) -> str:
        """Page content for an extraction prompt: contact/team sections first, then main text."""
        parts = []
        if self.title:
            parts.append(f"Title: {self.title}")
        if self.meta_description:
            parts.append(f"Description: {self.meta_description}")
        if self.contact_text:
            parts.append(self.contact_text)
        if self.text:
            parts.append(self.text)
        content = "\n\n".join(parts)
        return content if len(content) <= max_chars else content[:max_chars] + "..."
