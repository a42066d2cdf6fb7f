"""
core data model for scholarnet.
a paper as listed by the search engine, plus its citation subtree.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Dict, Any

from .errors import BadHtmlError

SCHOLAR_URL_BASE = "https://scholar.google.com/scholar"

# largest value a cluster id may take (unsigned 64-bit)
MAX_CLUSTER_ID = 2 ** 64 - 1

CLUSTER_ID_RE = re.compile(r"(cluster|cites)=(\d+)")


def citation_url_for_id(cluster_id: int) -> str:
    """url of the "cited by" listing for a cluster id."""
    return f"{SCHOLAR_URL_BASE}?cites={cluster_id}"


def cluster_id_from_url(url: str) -> int:
    """
    mine the cluster id from a url or query string.
    accepts either a cluster= or a cites= parameter.
    """
    match = CLUSTER_ID_RE.search(url)
    if not match:
        raise BadHtmlError(f"no cluster id in {url!r}")

    cluster_id = int(match.group(2))
    if cluster_id > MAX_CLUSTER_ID:
        raise BadHtmlError(f"cluster id out of range in {url!r}")
    return cluster_id


@dataclass(frozen=True)
class Paper:
    """
    one paper as listed by the search engine.

    immutable: the crawler builds expanded copies with with_citers().
    citers is None when the paper was not expanded; an expanded paper
    with no citers has an empty tuple.
    """
    title: str
    cluster_id: int
    link: Optional[str] = None
    year: Optional[int] = None
    citation_count: Optional[int] = None

    # citation subtree, in source-page order
    citers: Optional[Tuple["Paper", ...]] = None
    citers_truncated: bool = False  # some citer branches failed and were pruned

    @property
    def citation_url(self) -> str:
        return citation_url_for_id(self.cluster_id)

    @property
    def is_expanded(self) -> bool:
        return self.citers is not None

    def with_citers(self, citers, truncated: bool = False) -> "Paper":
        """return a copy of this paper carrying the given citers."""
        return replace(self, citers=tuple(citers), citers_truncated=truncated)

    def to_dict(self) -> Dict[str, Any]:
        """serialize for export."""
        data = {
            "title": self.title,
            "cluster_id": self.cluster_id,
            "link": self.link,
            "year": self.year,
            "citation_count": self.citation_count,
            "citation_url": self.citation_url,
        }
        if self.citers is not None:
            data["citers"] = [c.to_dict() for c in self.citers]
            data["citers_truncated"] = self.citers_truncated
        return data

    def __str__(self):
        year = f" ({self.year})" if self.year else ""
        return f'"{self.title}"{year} [cluster: {self.cluster_id}]'
