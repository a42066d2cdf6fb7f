"""
citation crawler - expands a seed paper's "cited by" subtree.

bounded by remaining depth only: every recursive step lowers it by one,
so citation cycles cannot make the crawl run away. a paper reached on
two branches is fetched twice.

a failure on the seed's own page is fatal. a failure further down only
prunes that branch; its siblings carry on.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.config import CrawlConfig, FailurePolicy
from ..core.errors import ScholarError, BlockedError, BRANCH_ERRORS
from ..core.models import Paper
from ..request.fetcher import PageFetcher
from ..request.query import CitationQuery, build_url
from ..scrape.extract import parse_html, is_blocked, scrape_citation_page
from .assembler import Branch, assemble

logger = logging.getLogger("scholarnet.crawler")


@dataclass
class CrawlFailure:
    """a pruned branch and why."""
    cluster_id: int
    title: str
    depth: int  # distance from the seed
    error: ScholarError

    def __str__(self):
        return f"{self.title[:50]} (cluster {self.cluster_id}): {self.error}"


@dataclass
class CrawlStats:
    """statistics for one crawl."""
    pages_fetched: int = 0
    papers_discovered: int = 0
    branches_pruned: int = 0
    failures: List[CrawlFailure] = field(default_factory=list)


class CitationCrawler:
    """
    expands citation subtrees through a page fetcher.

    usage:
        crawler = CitationCrawler(HttpFetcher())
        paper = crawler.expand(seed, depth=2, max_results=5)
        for citer in paper.citers:
            print(citer.title, len(citer.citers or ()))
    """

    def __init__(self, fetcher: PageFetcher, config: Optional[CrawlConfig] = None):
        self.fetcher = fetcher
        self.config = config or CrawlConfig()
        self.stats = CrawlStats()
        self._stats_lock = threading.Lock()

    def fetch_citers(self, paper: Paper, max_results: Optional[int] = None) -> List[Paper]:
        """one level: the papers listed on paper's citation page."""
        count = max_results if max_results is not None else self.config.max_results
        url = build_url(CitationQuery(paper.citation_url, count))

        body = self.fetcher.fetch(url)
        doc = parse_html(body)
        if is_blocked(doc):
            raise BlockedError(f"citation page of cluster {paper.cluster_id} was blocked")

        page = scrape_citation_page(doc)
        if page.cluster_id != paper.cluster_id:
            logger.debug(
                f"[crawler] citation page of {paper.cluster_id} is about {page.cluster_id}"
            )

        with self._stats_lock:
            self.stats.pages_fetched += 1
            self.stats.papers_discovered += len(page.citers)
        return list(page.citers)

    def expand(
        self,
        seed: Paper,
        depth: Optional[int] = None,
        max_results: Optional[int] = None
    ) -> Paper:
        """
        seed with citers populated down to depth levels.

        depth 0 returns seed unchanged without fetching. errors on the
        seed's page propagate; errors below it prune the failing branch.
        """
        depth = self.config.max_depth if depth is None else depth
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")

        self.stats = CrawlStats()
        if depth == 0:
            return seed

        logger.info(f"[crawler] expanding {seed.title[:50]} to depth {depth}")
        root = Branch(paper=seed, remaining=depth)
        root.attach(self.fetch_citers(seed, max_results))
        return self._expand_root(root, max_results)

    def expand_page(
        self,
        page: Paper,
        depth: int,
        max_results: Optional[int] = None
    ) -> Paper:
        """
        like expand(), for a target paper whose citers are already known
        (a citation page loaded from elsewhere). they count as level 1.
        """
        if page.citers is None:
            raise ValueError("page has no citers to expand")
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")

        self.stats = CrawlStats()
        if depth == 0:
            return page

        root = Branch(paper=page, remaining=depth)
        root.attach(list(page.citers))
        return self._expand_root(root, max_results)

    def _expand_root(self, root: Branch, max_results: Optional[int]) -> Paper:
        if self.config.max_workers > 1:
            self._expand_levels(root.children, max_results)
        else:
            for child in root.children:
                self._expand_branch(child, max_results, 1)

        paper = assemble(root, self.config.failure_policy)
        logger.info(
            f"[crawler] done: {self.stats.pages_fetched} pages, "
            f"{self.stats.papers_discovered} papers, "
            f"{self.stats.branches_pruned} pruned"
        )
        return paper

    def _expand_branch(self, branch: Branch, max_results: Optional[int], level: int):
        """sequential depth-first expansion of a descendant branch."""
        if not branch.needs_fetch:
            return
        if not self._try_fetch(branch, max_results, level):
            return
        for child in branch.children:
            self._expand_branch(child, max_results, level + 1)

    def _expand_levels(self, frontier: List[Branch], max_results: Optional[int]):
        """level-by-level expansion with parallel fetches per level."""
        level = 1
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            while frontier:
                pending = [b for b in frontier if b.needs_fetch]
                # map keeps discovery order; results are only success flags
                list(executor.map(
                    lambda b: self._try_fetch(b, max_results, level), pending
                ))
                frontier = [c for b in pending if b.children for c in b.children]
                level += 1

    def _try_fetch(self, branch: Branch, max_results: Optional[int], level: int) -> bool:
        try:
            branch.attach(self.fetch_citers(branch.paper, max_results))
            return True
        except BRANCH_ERRORS as e:
            branch.error = e
            self._record_failure(branch, e, level)
            return False

    def _record_failure(self, branch: Branch, error: ScholarError, level: int):
        failure = CrawlFailure(
            cluster_id=branch.paper.cluster_id,
            title=branch.paper.title,
            depth=level,
            error=error
        )
        with self._stats_lock:
            self.stats.branches_pruned += 1
            self.stats.failures.append(failure)

        if self.config.failure_policy == FailurePolicy.DROP:
            logger.debug(f"[crawler] dropped branch {failure}")
        else:
            logger.warning(f"[crawler] pruned branch {failure}")
