from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocChunk:
    title: str
    content: str

    @property
    def searchable(self) -> str:
        return f"{self.title} {self.content}".lower()

    def render(self) -> str:
        return f"{self.title}\n{self.content}"


def split_chunks(markdown: str) -> List[DocChunk]:
    chunks: List[DocChunk] = []
    title: Optional[str] = None
    body: List[str] = []
    for line in markdown.splitlines():
        if line.startswith("## "):
            if title is not None:
                chunks.append(DocChunk(title=title, content="\n".join(body).strip()))
            title = line[3:].strip()
            body = []
        else:
            body.append(line)
    if title is not None:
        chunks.append(DocChunk(title=title, content="\n".join(body).strip()))
    return chunks


class StaticDocRetriever:
    """Keyword lookup over ``## ``-delimited sections of local markdown files."""

    def __init__(self, paths: Iterable[Path]) -> None:
        self.chunks: List[DocChunk] = []
        for path in paths:
            self.chunks.extend(self._load(Path(path)))
        logger.debug("Loaded %d knowledge chunks", len(self.chunks))

    @staticmethod
    def _load(path: Path) -> List[DocChunk]:
        if not path.is_file():
            logger.warning("Knowledge file not found: %s", path)
            return []
        try:
            return split_chunks(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read knowledge file %s: %s", path, exc)
            return []

    def chunk_count(self) -> int:
        return len(self.chunks)

    def find_snippet(self, query: str) -> Optional[str]:
        if not query or not query.strip() or not self.chunks:
            return None
        keywords = list(dict.fromkeys(query.lower().split()))
        best: Optional[DocChunk] = None
        best_hits = 0
        for chunk in self.chunks:
            text = chunk.searchable
            hits = sum(1 for keyword in keywords if keyword in text)
            if hits > best_hits:
                best, best_hits = chunk, hits
        # At least half the keywords, or one for short queries.
        if best is None or best_hits < max(1, len(keywords) // 2):
            return None
        return best.render()
