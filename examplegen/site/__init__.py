"""Site-level outputs that sit next to the compiled examples."""

from .assets import AssetCopier, CopyReport
from .robots import ROBOTS_ALLOW, ROBOTS_DISALLOW, write_robots
from .sitemap import SitemapBuilder

__all__ = [
    "AssetCopier",
    "CopyReport",
    "ROBOTS_ALLOW",
    "ROBOTS_DISALLOW",
    "SitemapBuilder",
    "write_robots",
]
