# File: sitemap_warmer/parser/sitemap_parser.py
"""sitemap_warmer.parser.sitemap_parser: Разбор sitemap index и urlset в структуры данных."""

from __future__ import annotations

from typing import List, Literal, Tuple, Union

from lxml import etree

from sitemap_warmer.crawler.models import DocumentEntry, SitemapIndexEntry
from sitemap_warmer.errors import SitemapParseError

XHTML_NS = "http://www.w3.org/1999/xhtml"

SitemapKind = Literal["index", "urlset"]


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _loc_text(element: etree._Element) -> str | None:
    loc = element.find("{*}loc")
    if loc is None or not loc.text or not loc.text.strip():
        return None
    return loc.text.strip()


def parse_xml(xml_content: Union[str, bytes]) -> etree._Element:
    """Разбирает XML строго (без recover) и возвращает корневой элемент.

    Внешние сущности и сетевой доступ парсера отключены.
    Байты декодирует lxml по XML-декларации; строка кодируется в UTF-8.

    Raises:
        SitemapParseError: если документ пустой или не является корректным XML.
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    if not xml_content.strip():
        raise SitemapParseError("empty document")
    parser = etree.XMLParser(
        ns_clean=True,
        recover=False,
        resolve_entities=False,
        no_network=True,
    )
    try:
        root = etree.fromstring(xml_content, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise SitemapParseError(f"invalid XML: {exc}") from exc
    if root is None:
        raise SitemapParseError("empty document")
    return root


def parse_sitemap_index(xml_content: Union[str, bytes]) -> List[SitemapIndexEntry]:
    """Возвращает расположения дочерних sitemap из ``<sitemapindex>``."""
    root = parse_xml(xml_content)
    if _local_name(root) != "sitemapindex":
        raise SitemapParseError(f"expected <sitemapindex>, got <{_local_name(root)}>")
    return _index_entries(root)


def parse_urlset(xml_content: Union[str, bytes]) -> List[DocumentEntry]:
    """Возвращает документы ``<urlset>`` вместе с их alternate-ссылками.

    Args:
        xml_content: строка с содержимым sitemap.

    Returns:
        Список DocumentEntry; ``<url>`` без ``<loc>`` пропускаются.

    Пример:
    ```python
    from sitemap_warmer.parser.sitemap_parser import parse_urlset

    for entry in parse_urlset(xml):
        print(entry.location, entry.alternates)
    ```
    """
    root = parse_xml(xml_content)
    if _local_name(root) != "urlset":
        raise SitemapParseError(f"expected <urlset>, got <{_local_name(root)}>")
    return _urlset_entries(root)


def parse_sitemap(
    xml_content: Union[str, bytes],
) -> Tuple[SitemapKind, Union[List[SitemapIndexEntry], List[DocumentEntry]]]:
    """Определяет тип sitemap по корневому тегу и разбирает его."""
    root = parse_xml(xml_content)
    name = _local_name(root)
    if name == "sitemapindex":
        return "index", _index_entries(root)
    if name == "urlset":
        return "urlset", _urlset_entries(root)
    raise SitemapParseError(f"unexpected root element <{name}>")


def _index_entries(root: etree._Element) -> List[SitemapIndexEntry]:
    entries: List[SitemapIndexEntry] = []
    for sitemap in root.iterfind("{*}sitemap"):
        location = _loc_text(sitemap)
        if location:
            entries.append(SitemapIndexEntry(location))
    return entries


def _urlset_entries(root: etree._Element) -> List[DocumentEntry]:
    entries: List[DocumentEntry] = []
    for url in root.iterfind("{*}url"):
        location = _loc_text(url)
        if not location:
            continue
        alternates = [
            link.get("href", "").strip()
            for link in url.iterfind(f"{{{XHTML_NS}}}link")
            if link.get("rel") == "alternate" and link.get("href", "").strip()
        ]
        entries.append(DocumentEntry(location, alternates))
    return entries


__all__ = [
    "parse_xml",
    "parse_sitemap",
    "parse_sitemap_index",
    "parse_urlset",
    "SitemapKind",
]
