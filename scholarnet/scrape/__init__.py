from .extract import (
    parse_html, is_blocked, scrape_papers, scrape_paper_one,
    scrape_target_paper, scrape_citation_page, scrape_cluster_page,
    parse_year, parse_citation_count
)
