import re

import justext
from bs4 import BeautifulSoup, Tag
from readability import Document

from common.logging import get_logger

logger = get_logger(__name__)

NOISE_TAGS = ["script", "style", "noscript", "iframe", "object", "embed", "svg", "canvas"]
BLOCK_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "li"]

# Page areas that tend to list people and contact details
CONTACT_SELECTORS = [
    "main",
    "#main",
    ".content",
    "#content",
    ".about",
    "#about",
    ".team",
    "#team",
    ".contact",
    "#contact",
    ".leadership",
    "#leadership",
    ".staff",
    "#staff",
    "footer",
]

METHOD_WEIGHTS = {"readability": 1.3, "justext": 1.1, "fallback": 1.0}
MIN_EXTRACTED_CHARS = 50


def squash(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def block_text(root: Tag, with_divs: bool = False, headings: bool = False) -> str:
    """Block-level text of `root` in document order, one paragraph per block."""
    for tag in root(NOISE_TAGS):
        tag.decompose()

    paragraphs = []
    for elem in root.find_all(BLOCK_TAGS + (["div"] if with_divs else [])):
        # divs only count for text that sits directly inside them
        if elem.name == "div" and not "".join(elem.find_all(string=True, recursive=False)).strip():
            continue
        text = elem.get_text(" ", strip=True)
        if len(text) <= 3:
            continue
        if headings and elem.name[0] == "h" and elem.name[1:].isdigit():
            text = f"{'#' * int(elem.name[1:])} {text}"
        paragraphs.append(text)

    return "\n\n".join(paragraphs) if paragraphs else squash(root.get_text(" ", strip=True))


def score_extraction(method: str, text: str | None) -> float:
    """Word count weighted by method; very short, huge or unstructured text is penalised."""
    if not text or len(text.strip()) < MIN_EXTRACTED_CHARS:
        return 0.0
    words = len(text.split())
    score = words * METHOD_WEIGHTS.get(method, 1.0)
    if words < 30:
        score *= 0.5
    elif words > 10_000:
        score *= 0.9
    return score * 1.1 if "\n\n" in text else score


class HtmlExtractor:
    """Turns raw HTML into text a model or a regex pass can work with."""

    def extract(self, html: str, language_name: str = "English") -> tuple[str, str]:
        """Run readability, jusText and a plain block walk; keep the best scoring text.

        Returns:
            Tuple of (method_name, extracted_text)
        """
        candidates = {
            "readability": self.extract_with_readability(html),
            "justext": self.extract_with_justext(html, language_name),
            "fallback": self.extract_fallback(html),
        }
        scored = {method: score_extraction(method, text) for method, text in candidates.items()}
        method = max(scored, key=scored.get)
        if scored[method] == 0:
            method = "fallback"
        logger.debug(f"[Extract] Using {method} ({scored[method]:.1f})")
        return method, candidates[method] or ""

    def extract_with_readability(self, html: str) -> str | None:
        try:
            summary = Document(html).summary()
        except Exception as e:  # readability raises plain Exception subclasses on odd markup
            logger.debug(f"[Extract] Readability failed: {e}")
            return None
        return block_text(BeautifulSoup(summary, "html.parser"), headings=True)

    def extract_with_justext(self, html: str, language_name: str) -> str | None:
        try:
            stoplist = justext.get_stoplist(language_name)
        except (KeyError, ValueError):
            stoplist = justext.get_stoplist("English")

        try:
            paragraphs = justext.justext(html.encode("utf-8", errors="ignore"), stoplist)
        except Exception as e:  # lxml parser errors surface as several unrelated types
            logger.debug(f"[Extract] jusText failed: {e}")
            return None

        texts = [p.text.strip() for p in paragraphs if not p.is_boilerplate and p.text.strip()]
        return "\n\n".join(texts) or None

    def extract_fallback(self, html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")
        return block_text(soup.body or soup, with_divs=True)

    def extract_contact_sections(self, soup: BeautifulSoup, max_chars: int = 8000) -> str | None:
        """Text of about/team/contact style sections plus any mailto: addresses."""
        pieces: dict[str, None] = {}
        for selector in CONTACT_SELECTORS:
            for elem in soup.select(selector):
                text = squash(elem.get_text(" ", strip=True))
                if text:
                    pieces.setdefault(text, None)

        mailtos = sorted(
            {
                a["href"][len("mailto:") :].split("?")[0]
                for a in soup.find_all("a", href=True)
                if a["href"].lower().startswith("mailto:")
            }
        )
        lines = list(pieces) + (["Emails: " + ", ".join(mailtos)] if mailtos else [])
        return "\n".join(lines)[:max_chars] if lines else None

    def get_meta_description(self, soup: BeautifulSoup) -> str | None:
        tag = soup.find("meta", attrs={"name": "description"}) or soup.find("meta", attrs={"property": "og:description"})
        content = tag.get("content") if tag else None
        return str(content).strip() if content else None
