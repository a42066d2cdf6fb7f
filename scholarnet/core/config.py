"""
configuration for scholarnet.
all settings in one place, easily tunable.
"""

import os
from dataclasses import dataclass, field
from enum import Enum

from .resilience import RetryConfig

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
)

# the search engine never lists more than this per page
MAX_PAGE_RESULTS = 10
DEFAULT_RESULT_COUNT = 5


class FailurePolicy(Enum):
    """what the crawler does with a descendant branch that fails."""
    MARK = "mark"  # prune it and mark the parent as truncated
    DROP = "drop"  # prune it silently


class OutputFormat(Enum):
    """how results are rendered."""
    HUMAN = "human"
    JSON = "json"


@dataclass
class FetcherConfig:
    """page fetcher settings."""
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0  # seconds
    follow_redirects: bool = True
    retry: RetryConfig = field(default_factory=RetryConfig)
    verbose: bool = False  # log every fetched url


@dataclass
class CrawlConfig:
    """citation crawl settings."""
    max_depth: int = 0
    max_results: int = DEFAULT_RESULT_COUNT  # per citation page, 1..10
    failure_policy: FailurePolicy = FailurePolicy.MARK
    max_workers: int = 1  # 1 = sequential depth-first


@dataclass
class OutputConfig:
    """output settings."""
    format: OutputFormat = OutputFormat.HUMAN
    indent: int = 2


@dataclass
class ScholarConfig:
    """master configuration for scholarnet."""
    fetcher: FetcherConfig = field(default_factory=FetcherConfig)
    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def default(cls) -> 'ScholarConfig':
        """return default configuration."""
        return cls()

    @classmethod
    def compat(cls) -> 'ScholarConfig':
        """silently drop failed citation branches, leaving no truncation mark."""
        config = cls()
        config.crawl.failure_policy = FailurePolicy.DROP
        return config

    @classmethod
    def from_env(cls) -> 'ScholarConfig':
        """default configuration with environment overrides."""
        config = cls()
        user_agent = os.environ.get("SCHOLARNET_USER_AGENT")
        if user_agent:
            config.fetcher.user_agent = user_agent
        timeout = os.environ.get("SCHOLARNET_TIMEOUT")
        if timeout:
            config.fetcher.timeout = float(timeout)
        workers = os.environ.get("SCHOLARNET_MAX_WORKERS")
        if workers:
            config.crawl.max_workers = max(1, int(workers))
        return config
