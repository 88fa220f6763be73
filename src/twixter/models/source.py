"""
Source data model: one feed to aggregate.
"""

from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass(frozen=True)
class Source:
    """A feed identified by its display label and locator.

    The locator is an ``http(s)://`` URL, a ``file://`` URL or a local path.
    """

    label: str
    locator: str

    @property
    def is_remote(self) -> bool:
        """Whether the locator is fetched over HTTP."""
        return urlparse(self.locator).scheme in ("http", "https")
