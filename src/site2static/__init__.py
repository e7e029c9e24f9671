"""Archive a website into a static, offline-browsable snapshot."""

from .archiver import CrawlFrontier, SiteArchiver, archive_site
from .config import ArchiveConfig
from .models import CrawlSummary

__version__ = '0.1.0'

__all__ = [
    'ArchiveConfig',
    'CrawlFrontier',
    'CrawlSummary',
    'SiteArchiver',
    'archive_site',
    '__version__',
]
