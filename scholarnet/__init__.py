"""
scholarnet - scrape academic search result pages and walk citation trees.
"""

from .core.config import ScholarConfig, CrawlConfig, FetcherConfig, FailurePolicy
from .core.errors import (
    ScholarError, InvalidQueryError, BadHtmlError, BlockedError, NetworkError
)
from .core.models import Paper, citation_url_for_id, cluster_id_from_url
from .request.query import SearchQuery, ClusterQuery, CitationQuery, build_url
from .request.fetcher import PageFetcher, HttpFetcher
from .graph.crawler import CitationCrawler
from .client import ScholarClient

__version__ = "0.1.0"

__all__ = [
    "ScholarConfig",
    "CrawlConfig",
    "FetcherConfig",
    "FailurePolicy",
    "ScholarError",
    "InvalidQueryError",
    "BadHtmlError",
    "BlockedError",
    "NetworkError",
    "Paper",
    "citation_url_for_id",
    "cluster_id_from_url",
    "SearchQuery",
    "ClusterQuery",
    "CitationQuery",
    "build_url",
    "PageFetcher",
    "HttpFetcher",
    "CitationCrawler",
    "ScholarClient"
]
