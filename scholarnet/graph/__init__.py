from .assembler import Branch, assemble
from .crawler import CitationCrawler, CrawlStats, CrawlFailure
