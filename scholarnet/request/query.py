"""
query builder - turns a typed request into a search engine url.

parameter names and order follow the search engine's advanced-search
form; they must stay byte-for-byte stable for requests to succeed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

from ..core.config import DEFAULT_RESULT_COUNT, MAX_PAGE_RESULTS
from ..core.errors import InvalidQueryError
from ..core.models import SCHOLAR_URL_BASE, MAX_CLUSTER_ID

logger = logging.getLogger("scholarnet.request")

LOCALE = "en"


def clamp_count(count: int) -> int:
    """clamp a result count into 1..MAX_PAGE_RESULTS without complaining."""
    return max(1, min(int(count), MAX_PAGE_RESULTS))


def _encode(value: Optional[str]) -> str:
    return quote(value, safe="") if value else ""


class Query(ABC):
    """a request to the search engine."""

    @abstractmethod
    def to_url(self) -> str:
        """full url which could be used to send a request."""
        pass


def build_url(query: Query) -> str:
    """build the url for any query variant."""
    url = query.to_url()
    logger.debug(f"[query] {type(query).__name__} -> {url}")
    return url


class SearchQuery(Query):
    """
    query to search the engine for papers.

    words and phrase share one slot: setting either replaces the other,
    a phrase being stored as a quoted token. valid only when words or
    authors are set.
    """

    def __init__(
        self,
        words: Optional[str] = None,
        phrase: Optional[str] = None,
        authors: Optional[str] = None,
        title_only: bool = False,
        count: int = DEFAULT_RESULT_COUNT
    ):
        self._count = DEFAULT_RESULT_COUNT
        self.words: Optional[str] = None
        self.authors: Optional[str] = None
        self.title_only = title_only
        self.count = count

        if words is not None:
            self.set_words(words)
        if phrase is not None:
            self.set_phrase(phrase)
        if authors is not None:
            self.set_authors(authors)

    @property
    def count(self) -> int:
        return self._count

    @count.setter
    def count(self, value: int):
        # maximum is 10; larger values are rounded down
        self._count = clamp_count(value)

    def set_words(self, words: str):
        self.words = words

    def append_words(self, words: str):
        """append words to the query, separated by one space."""
        if self.words:
            self.words = f"{self.words} {words}"
        else:
            self.words = words

    def set_phrase(self, phrase: str):
        self.set_words(f'"{phrase}"')

    def append_phrase(self, phrase: str):
        self.append_words(f'"{phrase}"')

    def set_authors(self, authors: str):
        self.authors = authors

    def append_authors(self, authors: str):
        if self.authors:
            self.authors = f"{self.authors} {authors}"
        else:
            self.authors = authors

    def set_title_only(self, title_only: bool):
        self.title_only = title_only

    def is_valid(self) -> bool:
        return bool(self.words) or bool(self.authors)

    def to_url(self) -> str:
        if not self.is_valid():
            raise InvalidQueryError("search query needs words, a phrase or authors")

        params = [
            ("as_q", _encode(self.words)),
            ("as_epq", ""),
            ("as_eq", ""),
            ("as_occt", "title" if self.title_only else "any"),
            ("as_sauthors", _encode(self.authors)),
            ("as_publication", ""),
            ("as_ylo", ""),
            ("as_yhi", ""),
            ("as_vis", "0"),
            ("btnG", ""),
            ("hl", LOCALE),
            ("num", str(self.count)),
            ("as_sdt", "0%2C5"),
        ]
        query = "&".join(f"{name}={value}" for name, value in params)
        return f"{SCHOLAR_URL_BASE}?{query}"

    def __repr__(self):
        return (
            f"SearchQuery(words={self.words!r}, authors={self.authors!r}, "
            f"title_only={self.title_only}, count={self.count})"
        )


class ClusterQuery(Query):
    """query for all versions of one paper, by cluster id."""

    def __init__(self, cluster_id: int):
        if not 0 <= cluster_id <= MAX_CLUSTER_ID:
            raise InvalidQueryError(f"cluster id out of range: {cluster_id}")
        self.cluster_id = cluster_id

    def to_url(self) -> str:
        return f"{SCHOLAR_URL_BASE}?cluster={self.cluster_id}"

    def __repr__(self):
        return f"ClusterQuery(cluster_id={self.cluster_id})"


class CitationQuery(Query):
    """query for the papers citing a paper, from its citation url."""

    def __init__(self, citation_url: str, count: int = DEFAULT_RESULT_COUNT):
        self.citation_url = citation_url
        self.count = clamp_count(count)

    @classmethod
    def for_paper(cls, paper, count: int = DEFAULT_RESULT_COUNT) -> 'CitationQuery':
        return cls(paper.citation_url, count)

    def to_url(self) -> str:
        separator = "&" if "?" in self.citation_url else "?"
        return f"{self.citation_url}{separator}hl={LOCALE}&num={self.count}"

    def __repr__(self):
        return f"CitationQuery(citation_url={self.citation_url!r}, count={self.count})"
