"""
shared pytest fixtures: saved result pages, a page builder and a fake fetcher.
"""

import html
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

from scholarnet.core.errors import NetworkError
from scholarnet.core.models import Paper, cluster_id_from_url
from scholarnet.request.fetcher import PageFetcher

TESTDATA = Path(__file__).parent / "testdata"


class PageBuilder:
    """builds result pages in the search engine's markup."""

    def block(self, paper: Paper, prefix: Optional[str] = None) -> str:
        title = html.escape(paper.title)
        if paper.link:
            title_html = f'<a href="{html.escape(paper.link)}">{title}</a>'
        else:
            title_html = title
        if prefix:
            title_html = f'<span class="gs_ct1">{prefix}</span> {title_html}'

        if paper.year is not None:
            byline = f"A Author&nbsp;- Some Journal, {paper.year}&nbsp;- example.org"
        else:
            byline = "A Author&nbsp;- Some Journal&nbsp;- example.org"

        links = [
            '<a href="javascript:void(0)" class="gs_or_sav">Save</a>',
            '<a href="javascript:void(0)" class="gs_or_cit">Cite</a>',
        ]
        if paper.citation_count is not None:
            links.append(
                f'<a href="/scholar?cites={paper.cluster_id}&amp;as_sdt=2005&amp;hl=en">'
                f'Cited by {paper.citation_count}</a>'
            )
        links.append('<a href="/scholar?q=related:abc:scholar.google.com/&amp;hl=en">Related articles</a>')
        links.append(f'<a href="/scholar?cluster={paper.cluster_id}&amp;hl=en">All 3 versions</a>')

        return (
            '<div class="gs_r gs_or gs_scl"><div class="gs_ri">'
            f'<h3 class="gs_rt">{title_html}</h3>'
            f'<div class="gs_a">{byline}</div>'
            '<div class="gs_rs">snippet</div>'
            f'<div class="gs_fl">{" ".join(links)}</div>'
            '</div></div>'
        )

    def listing(self, papers: List[Paper]) -> str:
        blocks = "\n".join(self.block(p) for p in papers)
        return (
            "<html><body><div id=\"gs_res_ccl\">"
            f"<div id=\"gs_res_ccl_mid\">{blocks}</div>"
            "</div></body></html>"
        )

    def citation(self, target: Paper, citers: List[Paper]) -> str:
        blocks = "\n".join(self.block(p) for p in citers)
        return (
            "<html><body>"
            "<div id=\"gs_rt_hdr\"><h2>"
            f"<a href=\"/scholar?cluster={target.cluster_id}&amp;hl=en\">{html.escape(target.title)}</a>"
            "</h2></div>"
            f"<div id=\"gs_res_ccl\"><div id=\"gs_res_ccl_mid\">{blocks}</div></div>"
            "</body></html>"
        )

    def blocked(self) -> str:
        return (TESTDATA / "captcha.html").read_text(encoding="utf-8")


class FakeFetcher(PageFetcher):
    """
    serves pages keyed by the cluster id in the url ("search" for searches).
    an Exception value is raised instead of returned.
    """

    def __init__(self, pages: Dict[Union[int, str], Union[str, Exception]]):
        self.pages = pages
        self.urls: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> str:
        with self._lock:
            self.urls.append(url)

        key = "search" if "as_q=" in url else cluster_id_from_url(url)
        page = self.pages.get(key)
        if page is None:
            raise NetworkError("not found", url=url)
        if isinstance(page, Exception):
            raise page
        return page

    @property
    def fetched_ids(self) -> List[int]:
        return [cluster_id_from_url(u) for u in self.urls if "as_q=" not in u]


def make_paper(n: int, **overrides) -> Paper:
    fields = dict(
        title=f"Paper number {n}",
        cluster_id=n,
        link=f"https://example.org/papers/{n}.pdf",
        year=1990 + n % 30,
        citation_count=n * 10
    )
    fields.update(overrides)
    return Paper(**fields)


@pytest.fixture
def pages():
    return PageBuilder()


@pytest.fixture
def paper_factory():
    return make_paper


@pytest.fixture
def fake_fetcher():
    """factory: fake_fetcher({cluster_id: html}) -> FakeFetcher."""
    return FakeFetcher


@pytest.fixture
def citation_web(pages):
    """
    factory turning {cluster_id: [citer ids]} into a FakeFetcher whose
    citation pages list those citers, in order.
    """
    def build(graph: Dict[int, List[int]], overrides: Optional[Dict] = None) -> FakeFetcher:
        served = {}
        for target_id, citer_ids in graph.items():
            served[target_id] = pages.citation(
                make_paper(target_id), [make_paper(i) for i in citer_ids]
            )
        served.update(overrides or {})
        return FakeFetcher(served)
    return build


@pytest.fixture
def search_html():
    return (TESTDATA / "search_results.html").read_text(encoding="utf-8")


@pytest.fixture
def citations_html():
    return (TESTDATA / "citations.html").read_text(encoding="utf-8")


@pytest.fixture
def cluster_html():
    return (TESTDATA / "cluster.html").read_text(encoding="utf-8")


@pytest.fixture
def empty_html():
    return (TESTDATA / "empty_results.html").read_text(encoding="utf-8")


@pytest.fixture
def captcha_html():
    return (TESTDATA / "captcha.html").read_text(encoding="utf-8")
