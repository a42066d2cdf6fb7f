"""
scholarnet CLI - search papers and walk their citations.
"""

import argparse
import sys
import logging
from typing import List, Optional

from .core.config import ScholarConfig, FailurePolicy, OutputFormat, MAX_PAGE_RESULTS
from .core.errors import ScholarError
from .core.models import Paper
from .core.resilience import setup_logging
from .client import ScholarClient
from .export.formats import render
from .request.fetcher import read_html_file
from .request.query import SearchQuery
from .scrape.extract import scrape_papers, scrape_citation_page

logger = logging.getLogger("scholarnet.cli")

SEARCH_ARGS = ("words", "phrase", "authors")
HTML_ARGS = ("search_html", "cite_html")


def result_count(value: str) -> int:
    """argparse type for --count: a positive integer up to 10."""
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("the value is not a positive integer")
    if count > MAX_PAGE_RESULTS:
        raise argparse.ArgumentTypeError(f"the value is too large; exceeding {MAX_PAGE_RESULTS}")
    if count <= 0:
        raise argparse.ArgumentTypeError("the value is not a positive integer")
    return count


def cluster_id(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("the value is not an integer")
    if not 0 <= parsed < 2 ** 64:
        raise argparse.ArgumentTypeError("the value is out of range")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scholarnet",
        description="Search papers and walk their citations.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  scholarnet --words "quantum theory" --count 3
  scholarnet --phrase "electromagnetic potentials" --authors aharonov --depth 1
  scholarnet --cluster-id 5545735591029960915 --json
  scholarnet --cite-html saved_citations.html --depth 1
        """
    )

    # search query
    search_group = parser.add_argument_group('search query')
    search_group.add_argument(
        "--count", "-c",
        type=result_count,
        help="maximum number of search results (default: 5)"
    )
    search_group.add_argument(
        "--words", "-w",
        help="search papers with these words"
    )
    search_group.add_argument(
        "--phrase", "-p",
        help="search papers with this exact phrase"
    )
    search_group.add_argument(
        "--authors", "-a",
        help="search papers with these authors"
    )
    search_group.add_argument(
        "--title-only", "-t",
        action="store_true",
        help="match words in the title only"
    )

    # other sources
    parser.add_argument(
        "--cluster-id",
        type=cluster_id,
        metavar="ID",
        help="look up the paper with this cluster id"
    )
    parser.add_argument(
        "--search-html",
        metavar="FILE",
        help="scrape this HTML file as a search results page (debugging)"
    )
    parser.add_argument(
        "--cite-html",
        metavar="FILE",
        help="scrape this HTML file as a citers list page (debugging)"
    )

    # crawl
    parser.add_argument(
        "--depth", "-d",
        type=int,
        default=0,
        help="follow 'cited by' links this many levels (default: 0)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="parallel fetches per crawl level (default: 1)"
    )
    parser.add_argument(
        "--silent-drop",
        action="store_true",
        help="drop failed citation branches without marking their parent"
    )

    # output
    parser.add_argument(
        "--json",
        action="store_true",
        help="output in JSON format"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="verbose mode"
    )
    return parser


def query_exists(args: argparse.Namespace) -> bool:
    """true if args name something to look up."""
    sources = SEARCH_ARGS + HTML_ARGS + ("cluster_id",)
    return any(getattr(args, name) is not None for name in sources)


def find_conflict(args: argparse.Namespace) -> Optional[str]:
    """description of the first conflicting pair of options, if any."""
    has_search = any(getattr(args, name) is not None for name in SEARCH_ARGS)
    has_html = any(getattr(args, name) is not None for name in HTML_ARGS)

    if has_search and args.cluster_id is not None:
        return "search options cannot be combined with --cluster-id"
    if has_search and has_html:
        return "search options cannot be combined with HTML file inputs"
    if args.cluster_id is not None and has_html:
        return "--cluster-id cannot be combined with HTML file inputs"
    if args.search_html is not None and args.cite_html is not None:
        return "--search-html cannot be combined with --cite-html"
    return None


def build_config(args: argparse.Namespace) -> ScholarConfig:
    config = ScholarConfig.from_env()
    config.fetcher.verbose = args.verbose
    config.crawl.max_depth = args.depth
    config.crawl.max_workers = max(1, args.workers)
    if args.count is not None:
        config.crawl.max_results = args.count
    if args.silent_drop:
        config.crawl.failure_policy = FailurePolicy.DROP
    if args.json:
        config.output.format = OutputFormat.JSON
    return config


def build_search_query(args: argparse.Namespace) -> SearchQuery:
    query = SearchQuery()
    if args.count is not None:
        query.count = args.count
    if args.words is not None:
        query.set_words(args.words)
    if args.phrase is not None:
        query.set_phrase(args.phrase)
    if args.authors is not None:
        query.set_authors(args.authors)
    if args.title_only:
        query.set_title_only(True)
    return query


def run(args: argparse.Namespace, client: ScholarClient) -> List[Paper]:
    """papers to print for parsed args, expanded to the requested depth."""
    depth = args.depth

    if args.cluster_id is not None:
        paper = client.lookup_cluster(args.cluster_id)
        return [client.expand_citations(paper, depth)]

    if args.cite_html is not None:
        page = scrape_citation_page(read_html_file(args.cite_html))
        return [client.crawler.expand_page(page, depth)]

    if args.search_html is not None:
        papers = scrape_papers(read_html_file(args.search_html))
    else:
        papers = client.search(build_search_query(args))

    return [client.expand_citations(p, depth) for p in papers]


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not query_exists(args):
        parser.print_help()
        parser.error("missing query")
    conflict = find_conflict(args)
    if conflict:
        parser.error(conflict)
    if args.depth < 0:
        parser.error("--depth must not be negative")

    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING)
    config = build_config(args)

    try:
        with ScholarClient(config=config) as client:
            papers = run(args, client)
            stats = client.last_crawl
    except ScholarError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    heading = "Search result:" if args.cite_html is None else "The target paper:"
    print(render(papers, config.output, heading))

    if stats.branches_pruned:
        logger.warning(f"[cli] {stats.branches_pruned} citation branches pruned")
    return 0


if __name__ == "__main__":
    sys.exit(main())
