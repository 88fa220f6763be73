"""Core modules for twixter.

External code (the CLI, scripts) should go through the service facade:

    from twixter.core import TimelineService

    service = TimelineService(config)
    lines = service.timeline()

The building blocks live in their own modules:
    - fetcher: HTTP and local feed fetching
    - timeline: source selection and newest-first merging
    - render: absolute and relative timestamp display
    - publisher: posting to the local feed, following sources
"""

# Service Facade
from twixter.core.services import TimelineService, create_timeline_service

# Result types (allowed for type hints and return values)
from twixter.core.fetcher import FetchResult, FetchStats

# Pure helpers
from twixter.core.render import format_duration, render_entry
from twixter.core.timeline import build_sources, merge, produce_timeline

__all__ = [
    "TimelineService",
    "create_timeline_service",
    "FetchResult",
    "FetchStats",
    "format_duration",
    "render_entry",
    "build_sources",
    "merge",
    "produce_timeline",
]
