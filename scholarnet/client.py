"""
scholar client - the caller-facing api.

search, cluster lookup and citation expansion over one page fetcher.
"""

import logging
from typing import List, Optional

from .core.config import ScholarConfig
from .core.errors import BlockedError
from .core.models import Paper, citation_url_for_id
from .graph.crawler import CitationCrawler, CrawlStats
from .request.fetcher import PageFetcher, HttpFetcher
from .request.query import Query, SearchQuery, ClusterQuery, CitationQuery, build_url
from .scrape.extract import (
    parse_html, is_blocked, scrape_papers, scrape_cluster_page, scrape_citation_page
)

logger = logging.getLogger("scholarnet.client")


class ScholarClient:
    """
    search engine client.

    usage:
        with ScholarClient() as client:
            papers = client.search(SearchQuery(words="quantum theory"))
            tree = client.expand_citations(papers[0], depth=2, max_results=5)
    """

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        config: Optional[ScholarConfig] = None
    ):
        self.config = config or ScholarConfig.default()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or HttpFetcher(self.config.fetcher)
        self.crawler = CitationCrawler(self.fetcher, self.config.crawl)

    def close(self):
        if self._owns_fetcher and hasattr(self.fetcher, "close"):
            self.fetcher.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def last_crawl(self) -> CrawlStats:
        """statistics of the most recent expand_citations call."""
        return self.crawler.stats

    def _get(self, query: Query):
        url = build_url(query)
        doc = parse_html(self.fetcher.fetch(url))
        if is_blocked(doc):
            raise BlockedError(f"blocked while fetching {url}")
        return doc

    def search(self, query: SearchQuery) -> List[Paper]:
        """papers matching a search query, in ranking order."""
        papers = scrape_papers(self._get(query))
        logger.info(f"[client] search returned {len(papers)} papers")
        return papers

    def lookup_cluster(self, cluster_id: int) -> Paper:
        """the paper identified by a cluster id."""
        return scrape_cluster_page(self._get(ClusterQuery(cluster_id)))

    def citations(self, paper: Paper, max_results: Optional[int] = None) -> Paper:
        """
        one level of citers for a paper.
        returns the target paper as its citation page names it.
        """
        count = max_results if max_results is not None else self.config.crawl.max_results
        return scrape_citation_page(self._get(CitationQuery(paper.citation_url, count)))

    def citations_for_id(self, cluster_id: int, max_results: Optional[int] = None) -> Paper:
        count = max_results if max_results is not None else self.config.crawl.max_results
        return scrape_citation_page(
            self._get(CitationQuery(citation_url_for_id(cluster_id), count))
        )

    def expand_citations(
        self,
        seed: Paper,
        depth: Optional[int] = None,
        max_results: Optional[int] = None
    ) -> Paper:
        """seed with its citation subtree expanded to depth."""
        return self.crawler.expand(seed, depth, max_results)
