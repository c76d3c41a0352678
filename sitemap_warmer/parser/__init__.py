"""sitemap_warmer.parser: Разбор XML sitemap."""

from .sitemap_parser import parse_sitemap, parse_sitemap_index, parse_urlset, parse_xml

__all__ = ["parse_xml", "parse_sitemap", "parse_sitemap_index", "parse_urlset"]
