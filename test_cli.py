#!/usr/bin/env python3
"""
test command line interface - option validation and output.

run with: pytest test_cli.py -v
"""

import argparse
import json
import logging
from unittest.mock import MagicMock

import pytest

from scholarnet.cli import (
    build_parser, build_config, build_search_query, find_conflict,
    main, query_exists, result_count, run
)
from scholarnet.core.config import FailurePolicy, OutputFormat
from conftest import TESTDATA, make_paper

SEARCH_HTML = str(TESTDATA / "search_results.html")
CITATIONS_HTML = str(TESTDATA / "citations.html")
CAPTCHA_HTML = str(TESTDATA / "captcha.html")


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    scholarnet_logger = logging.getLogger("scholarnet")
    for handler in list(scholarnet_logger.handlers):
        scholarnet_logger.removeHandler(handler)
    scholarnet_logger.setLevel(logging.NOTSET)


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestOptions:

    @pytest.mark.parametrize("value,expected", [("1", 1), ("5", 5), ("10", 10)])
    def test_result_count(self, value, expected):
        assert result_count(value) == expected

    @pytest.mark.parametrize("value", ["0", "-3", "11", "many"])
    def test_result_count_rejects(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            result_count(value)

    def test_count_too_large_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            parse("--words", "x", "--count", "11")
        assert exc_info.value.code == 2

    def test_defaults(self):
        args = parse("-w", "quantum")
        assert args.depth == 0
        assert args.count is None
        assert not args.title_only
        assert not args.json

    @pytest.mark.parametrize("argv,expected", [
        ([], False),
        (["-t"], False),
        (["-c", "3"], False),
        (["-w", "x"], True),
        (["-a", "bohm"], True),
        (["-p", "a b"], True),
        (["--cluster-id", "12"], True),
        (["--search-html", "f.html"], True),
        (["--cite-html", "f.html"], True),
    ])
    def test_query_exists(self, argv, expected):
        assert query_exists(parse(*argv)) is expected

    @pytest.mark.parametrize("argv", [
        ["-w", "x", "--cluster-id", "1"],
        ["-a", "x", "--search-html", "f.html"],
        ["-p", "x", "--cite-html", "f.html"],
        ["--cluster-id", "1", "--cite-html", "f.html"],
        ["--search-html", "f.html", "--cite-html", "g.html"],
    ])
    def test_conflicts(self, argv):
        assert find_conflict(parse(*argv)) is not None

    @pytest.mark.parametrize("argv", [
        ["-w", "x", "-p", "y z", "-a", "bohm", "-t", "-c", "3"],
        ["--cluster-id", "1", "-d", "2"],
        ["--cite-html", "f.html", "-d", "1"],
    ])
    def test_compatible_options(self, argv):
        assert find_conflict(parse(*argv)) is None

    def test_build_search_query(self):
        query = build_search_query(parse("-w", "x", "-p", "y z", "-a", "bohm", "-t", "-c", "3"))
        assert query.words == '"y z"'
        assert query.authors == "bohm"
        assert query.title_only
        assert query.count == 3

    def test_build_config(self):
        config = build_config(parse("-w", "x", "-c", "7", "-d", "2", "--silent-drop", "--json"))
        assert config.crawl.max_results == 7
        assert config.crawl.max_depth == 2
        assert config.crawl.failure_policy == FailurePolicy.DROP
        assert config.output.format == OutputFormat.JSON


class TestRun:

    def test_cluster_id(self):
        client = MagicMock()
        paper = make_paper(1)
        client.lookup_cluster.return_value = paper
        client.expand_citations.return_value = paper

        assert run(parse("--cluster-id", "1", "-d", "2"), client) == [paper]
        client.lookup_cluster.assert_called_once_with(1)
        client.expand_citations.assert_called_once_with(paper, 2)

    def test_search(self):
        client = MagicMock()
        client.search.return_value = [make_paper(1), make_paper(2)]
        client.expand_citations.side_effect = lambda paper, depth: paper

        papers = run(parse("-a", "bohm", "-d", "1"), client)

        assert [p.cluster_id for p in papers] == [1, 2]
        assert client.search.call_args[0][0].authors == "bohm"
        assert client.expand_citations.call_count == 2

    def test_cite_html(self):
        client = MagicMock()
        client.crawler.expand_page.side_effect = lambda page, depth: page

        papers = run(parse("--cite-html", CITATIONS_HTML, "-d", "1"), client)

        assert papers[0].cluster_id == 5545735591029960915
        assert len(papers[0].citers) == 2
        client.search.assert_not_called()


class TestMain:

    def test_missing_query(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
        assert "missing query" in capsys.readouterr().err

    def test_conflict(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-w", "x", "--cluster-id", "1"])
        assert exc_info.value.code == 2
        assert "--cluster-id" in capsys.readouterr().err

    def test_negative_depth(self):
        with pytest.raises(SystemExit):
            main(["-w", "x", "-d", "-1"])

    def test_search_html(self, capsys):
        assert main(["--search-html", SEARCH_HTML]) == 0

        out = capsys.readouterr().out
        assert out.startswith("Search result:")
        assert "Quantum theory of solids" in out
        assert "cluster: 5545735591029960915" in out

    def test_search_html_json(self, capsys):
        assert main(["--search-html", SEARCH_HTML, "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert [d["year"] for d in data] == [1996, 1963, 1959]
        assert "citers" not in data[0]

    def test_cite_html(self, capsys):
        assert main(["--cite-html", CITATIONS_HTML]) == 0

        out = capsys.readouterr().out
        assert out.startswith("The target paper:")
        assert "Quantal phase factors accompanying adiabatic changes" in out
        assert "Multiferroics" in out

    def test_blocked_page(self, capsys):
        assert main(["--search-html", CAPTCHA_HTML]) == 1
        assert "BLOCKED" in capsys.readouterr().err

    def test_missing_file(self, capsys, tmp_path):
        assert main(["--search-html", str(tmp_path / "nope.html")]) == 1
        assert "error:" in capsys.readouterr().err
