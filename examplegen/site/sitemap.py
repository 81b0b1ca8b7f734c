"""sitemap.xml generation."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, List

from ..paths import ExampleFile

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
SITEMAP_FILENAME = "sitemap.xml"


class SitemapBuilder:
    """Turns example files into a single sitemap document."""

    def __init__(self, host: str) -> None:
        self.host = host.rstrip("/")

    def urls(self, examples: Iterable[ExampleFile]) -> List[str]:
        locations = [self.host + "/"]
        seen = set(locations)
        for example in sorted(examples, key=lambda item: item.path):
            location = example.canonical_url(self.host)
            if location not in seen:
                seen.add(location)
                locations.append(location)
        return locations

    def build(self, examples: Iterable[ExampleFile]) -> str:
        urlset = ET.Element("urlset", xmlns=SITEMAP_NAMESPACE)
        for location in self.urls(examples):
            url = ET.SubElement(urlset, "url")
            ET.SubElement(url, "loc").text = location
        ET.indent(urlset)
        body = ET.tostring(urlset, encoding="unicode")
        return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'

    def write(self, examples: Iterable[ExampleFile], dest: Path) -> Path:
        dest.mkdir(parents=True, exist_ok=True)
        target = dest / SITEMAP_FILENAME
        target.write_text(self.build(examples), encoding="utf-8")
        return target


__all__ = ["SITEMAP_FILENAME", "SitemapBuilder"]
