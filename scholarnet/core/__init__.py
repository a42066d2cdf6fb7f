from .models import Paper, SCHOLAR_URL_BASE, citation_url_for_id, cluster_id_from_url
from .errors import (
    ScholarError, InvalidQueryError, BadHtmlError, BlockedError, NetworkError
)
from .config import (
    ScholarConfig, FetcherConfig, CrawlConfig, OutputConfig,
    FailurePolicy, OutputFormat
)
from .resilience import RetryConfig, retry_with_backoff, setup_logging
