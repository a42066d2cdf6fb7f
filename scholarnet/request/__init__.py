from .query import Query, SearchQuery, ClusterQuery, CitationQuery, build_url, clamp_count
from .fetcher import PageFetcher, HttpFetcher, read_html_file
