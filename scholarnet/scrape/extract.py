"""
html extraction engine - turns result pages into Paper records.

the markup is not a stable schema: titles come linked or unlinked,
footers mix the "cited by" link with other links, and ids have to be
mined from query strings. every required extraction point raises
BadHtmlError when the page does not match; an anti-automation page
raises BlockedError before any extraction is attempted.

page layout (simplified):

    <div id="gs_res_ccl_mid">
      <div class="gs_ri">
        <h3 class="gs_rt"> [<span>prefix</span>] <a href="...">title</a> </h3>
        <div class="gs_a">authors - venue, 1996 - publisher</div>
        <div class="gs_fl">
          <a href="/scholar?cites=123">Cited by 45</a>
          <a href="/scholar?q=related:...">Related articles</a>
          <a href="/scholar?cluster=123">All 7 versions</a>
        </div>
      </div>
      ...
    </div>
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..core.errors import BadHtmlError, BlockedError
from ..core.models import Paper, CLUSTER_ID_RE, MAX_CLUSTER_ID

logger = logging.getLogger("scholarnet.scrape")

RESULTS_CONTAINER_ID = "gs_res_ccl_mid"
RESULT_CLASS = "gs_ri"
TITLE_CLASS = "gs_rt"
TITLE_PREFIX_TAG = "span"
BYLINE_CLASS = "gs_a"
FOOTER_CLASS = "gs_fl"
TARGET_HEADER_ID = "gs_rt_hdr"

# markers of the anti-automation interstitial (tag, attrs)
BLOCKED_MARKERS = (
    ("form", {"id": "gs_captcha_f"}),
    ("div", {"id": "gs_captcha_ccl"}),
    ("form", {"id": "captcha-form"}),
    ("div", {"id": "recaptcha"}),
    ("div", {"class": "g-recaptcha"}),
)

# "author - venue, 1996 - publisher" or "author - 1996"
YEAR_RE = re.compile(r".*\s-\s.*(?<!\d)((?:18|19|20)\d{2})(?!\d)(\s-\s.+)?", re.DOTALL)
DIGITS_RE = re.compile(r"\d+")

Document = Union[str, BeautifulSoup]


@dataclass
class ArticleTitle:
    title: str
    link: Optional[str] = None


@dataclass
class ArticleFooter:
    cluster_id: int
    citation_count: Optional[int] = None


def parse_html(text: str) -> BeautifulSoup:
    """parse raw page text into a document tree."""
    return BeautifulSoup(text, "html.parser")


def _as_document(doc: Document) -> BeautifulSoup:
    if isinstance(doc, BeautifulSoup):
        return doc
    return parse_html(doc)


def _clean(text: str) -> str:
    return " ".join(text.split())


# blocked pages

def is_blocked(doc: Document) -> bool:
    """true if the page is the anti-automation interstitial."""
    doc = _as_document(doc)
    return any(doc.find(name, attrs=attrs) is not None for name, attrs in BLOCKED_MARKERS)


def ensure_not_blocked(doc: BeautifulSoup):
    if is_blocked(doc):
        raise BlockedError("the search engine served an anti-automation page")


# field parsers

def parse_year(text: str) -> Optional[int]:
    """publication year from a byline fragment, or None."""
    match = YEAR_RE.search(text)
    if not match:
        return None
    return int(match.group(1))


def parse_citation_count(text: str) -> int:
    """
    first run of digits in a "cited by" label.
    label language does not matter ("Cited by 12", "引用元 12").
    """
    match = DIGITS_RE.search(text)
    if not match:
        raise BadHtmlError(f"no citation count in {text!r}")
    return int(match.group())


def _id_param(href: Optional[str]) -> Optional[Tuple[str, int]]:
    """(parameter name, id) of the first in-range cluster=/cites= parameter."""
    if not href:
        return None
    for match in CLUSTER_ID_RE.finditer(href):
        value = int(match.group(2))
        if value <= MAX_CLUSTER_ID:
            return match.group(1), value
    return None


# single result block

def scrape_article_title(block: Tag) -> ArticleTitle:
    """
    title and link of one result.

    1. linked title: <h3 class="gs_rt"><span>..</span><a href="x">title</a></h3>
    2. unlinked title: <h3 class="gs_rt"><span>[CITATION]</span> title</h3>

    the linked form is checked first; the span prefix may be missing.
    """
    region = block.find(class_=TITLE_CLASS)
    if region is None:
        raise BadHtmlError("result has no title region")

    anchor = region.find("a", recursive=False)
    if anchor is not None:
        title = ArticleTitle(title=_clean(anchor.get_text()), link=anchor.get("href") or None)
    else:
        parts = []
        for child in region.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, Tag):
                if child.name == TITLE_PREFIX_TAG:
                    continue
                parts.append(child.get_text())
            else:
                parts.append(str(child))
        title = ArticleTitle(title=_clean("".join(parts)))

    if not title.title:
        raise BadHtmlError("result has an empty title")
    return title


def scrape_article_year(block: Tag) -> Optional[int]:
    """
    year from the byline; None when no fragment carries one.

    <div class="gs_a"><a href="/citations?user=0">author</a> - journal, 1996 - site</div>
    """
    region = block.find(class_=BYLINE_CLASS)
    if region is None:
        return None

    for text in region.find_all(string=True):
        year = parse_year(str(text))
        if year is not None:
            return year
    return None


def scrape_article_footer(block: Tag) -> ArticleFooter:
    """
    cluster id and citation count from the footer links.

    sibling links ("Save", "Cite", "Related articles") carry no id
    parameter and are skipped, whatever their position. the count is
    read from the cites= link; without one the paper has no count.
    """
    footer = block.find(class_=FOOTER_CLASS)
    if footer is None:
        raise BadHtmlError("result has no footer")

    cluster_id = None
    citation_count = None
    for link in footer.find_all("a", recursive=False):
        param = _id_param(link.get("href"))
        if param is None:
            continue

        name, value = param
        if cluster_id is None:
            cluster_id = value
        if name == "cites":
            citation_count = parse_citation_count(link.get_text())
            break

    if cluster_id is None:
        raise BadHtmlError("result footer has no cluster id link")
    return ArticleFooter(cluster_id=cluster_id, citation_count=citation_count)


def scrape_paper_one(block: Tag) -> Paper:
    """extract one Paper from a result block."""
    title = scrape_article_title(block)
    year = scrape_article_year(block)
    footer = scrape_article_footer(block)

    return Paper(
        title=title.title,
        cluster_id=footer.cluster_id,
        link=title.link,
        year=year,
        citation_count=footer.citation_count
    )


# pages

def _result_blocks(doc: BeautifulSoup) -> List[Tag]:
    container = doc.find(id=RESULTS_CONTAINER_ID)
    if container is None:
        raise BadHtmlError("page has no results container")
    return container.find_all(class_=RESULT_CLASS)


def scrape_papers(doc: Document) -> List[Paper]:
    """
    all papers of a listing page (search results or citers), in page order.
    an empty results container is an empty list, not an error.
    """
    doc = _as_document(doc)
    ensure_not_blocked(doc)

    papers = [scrape_paper_one(block) for block in _result_blocks(doc)]
    logger.debug(f"[scrape] {len(papers)} papers on listing page")
    return papers


def scrape_target_paper(doc: Document) -> Paper:
    """
    the paper a citation page is about.

    <div id="gs_rt_hdr">
      <h2><a href="/scholar?cluster=0">title</a></h2>
    </div>
    """
    doc = _as_document(doc)
    ensure_not_blocked(doc)

    header = doc.find(id=TARGET_HEADER_ID)
    heading = header.find("h2", recursive=False) if header is not None else None
    if heading is None:
        raise BadHtmlError("page has no target paper header")

    node = None
    for child in heading.children:
        if isinstance(child, Tag) and child.name == "a":
            node = child
            break
        if isinstance(child, NavigableString) and not isinstance(child, Comment) and child.strip():
            node = child
            break
    if node is None:
        raise BadHtmlError("target paper header is empty")

    href = node.get("href") if isinstance(node, Tag) else None
    if not href:
        raise BadHtmlError("target paper header has no link")

    title = _clean(node.get_text() if isinstance(node, Tag) else str(node))
    cluster_id = _id_param(href)
    if cluster_id is None:
        raise BadHtmlError(f"no cluster id in {href!r}")

    return Paper(title=title, cluster_id=cluster_id[1])


def scrape_citation_page(doc: Document) -> Paper:
    """target paper of a citation page with its citers attached."""
    doc = _as_document(doc)
    target = scrape_target_paper(doc)
    citers = scrape_papers(doc)
    return target.with_citers(citers)


def scrape_cluster_page(doc: Document) -> Paper:
    """the paper a cluster page is about: its first result block."""
    doc = _as_document(doc)
    ensure_not_blocked(doc)

    blocks = _result_blocks(doc)
    if not blocks:
        raise BadHtmlError("cluster page lists no paper")
    return scrape_paper_one(blocks[0])
