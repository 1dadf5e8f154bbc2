"""Atom feed and entry models for Splunk REST responses.

Splunk answers most REST requests with an Atom document. A single
resource comes back either as an ``<entry>`` or as a ``<feed>`` holding
one entry; collections come back as a feed with one entry per member.
Each entry's ``<content>`` wraps a ``<s:dict>`` of ``<s:key>`` elements
whose values are text, nested ``<s:dict>`` elements, or ``<s:list>``
elements of ``<s:item>`` values.

The content of an entry is parsed into a plain ``dict``. Key names are
kept as the server sends them, except that colon-qualified names are
nested: ``eai:acl`` is stored as ``content["eai"]["acl"]``. The entry's
``<title>`` is folded into the content under ``title`` unless the
content already defines one.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from lxml import etree
from pydantic import BaseModel, Field

from ..exceptions import InvalidOperationError

ATOM_NS = "http://www.w3.org/2005/Atom"
REST_NS = "http://dev.splunk.com/ns/rest"

XMLParser = etree.XMLParser(
    remove_blank_text=True, resolve_entities=False, no_network=True
)


def parse_document(body: Union[str, bytes]) -> etree._Element:
    """Parse a response body into its root element.

    :param body: XML response body
    :type body: Union[str, bytes]
    :return: Root element of the document
    :rtype: etree._Element
    :raises etree.XMLSyntaxError: If the body is not well-formed XML
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    return etree.fromstring(body, parser=XMLParser)


def local_name(element: etree._Element) -> str:
    """Return the tag of ``element`` without its namespace."""
    return etree.QName(element).localname


def is_feed(element: etree._Element) -> bool:
    return local_name(element) == "feed"


def _child(element: etree._Element, name: str) -> Optional[etree._Element]:
    for child in element:
        if isinstance(child.tag, str) and local_name(child) == name:
            return child
    return None


def _children(element: etree._Element, name: str) -> List[etree._Element]:
    return [
        child
        for child in element
        if isinstance(child.tag, str) and local_name(child) == name
    ]


def _text(element: etree._Element, name: str) -> Optional[str]:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def _parse_value(element: etree._Element) -> Any:
    """Parse the value held by a ``<s:key>`` or ``<s:item>`` element."""
    nested = _child(element, "dict")
    if nested is not None:
        return _parse_dict(nested)
    nested = _child(element, "list")
    if nested is not None:
        return [_parse_value(item) for item in _children(nested, "item")]
    if element.text is None:
        return None
    return element.text


def _store(mapping: Dict[str, Any], name: str, value: Any) -> None:
    head, sep, tail = name.partition(":")
    if not sep or not head or not tail:
        mapping[name] = value
        return
    nested = mapping.setdefault(head, {})
    if not isinstance(nested, dict):
        # A plain key already owns the prefix; keep the qualified name flat.
        mapping[name] = value
        return
    _store(nested, tail, value)


def _parse_dict(element: etree._Element) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key in _children(element, "key"):
        name = key.get("name")
        if name is None:
            continue
        _store(result, name, _parse_value(key))
    return result


def parse_content(element: Optional[etree._Element]) -> Dict[str, Any]:
    """Parse an Atom ``<content>`` element into a field-value mapping.

    :param element: The ``<content>`` element, if the entry has one
    :type element: Optional[etree._Element]
    :return: Field-value mapping; empty when there is no ``<s:dict>``
    :rtype: Dict[str, Any]
    """
    if element is None:
        return {}
    nested = _child(element, "dict")
    if nested is None:
        return {}
    return _parse_dict(nested)


class AtomEntry(BaseModel):
    """One ``<entry>`` of a Splunk Atom response.

    :param title: Entry title
    :type title: Optional[str]
    :param id: Entry id, the absolute URL of the resource
    :type id: Optional[str]
    :param author: Name of the entry author
    :type author: Optional[str]
    :param published: Publication timestamp
    :type published: Optional[datetime]
    :param updated: Last update timestamp
    :type updated: Optional[datetime]
    :param links: Link targets keyed by ``rel``
    :type links: Dict[str, str]
    :param content: Parsed content mapping
    :type content: Dict[str, Any]
    """

    title: Optional[str] = None
    id: Optional[str] = None
    author: Optional[str] = None
    published: Optional[datetime] = None
    updated: Optional[datetime] = None
    links: Dict[str, str] = Field(default_factory=dict)
    content: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_element(cls, element: etree._Element) -> "AtomEntry":
        """Build an entry from its ``<entry>`` element.

        :param element: An Atom ``<entry>`` element
        :type element: etree._Element
        :return: Parsed entry
        :rtype: AtomEntry
        :raises InvalidOperationError: If ``element`` is not an entry
        """
        if local_name(element) != "entry":
            raise InvalidOperationError(
                f"Expected an Atom entry, got <{local_name(element)}>"
            )

        title = _text(element, "title")
        content = parse_content(_child(element, "content"))
        if title is not None:
            content.setdefault("title", title)

        author = _child(element, "author")
        links = {
            link.get("rel"): link.get("href")
            for link in _children(element, "link")
            if link.get("rel") and link.get("href")
        }

        return cls(
            title=title,
            id=_text(element, "id"),
            author=_text(author, "name") if author is not None else None,
            published=_text(element, "published"),
            updated=_text(element, "updated"),
            links=links,
            content=content,
        )


class AtomFeed(BaseModel):
    """A ``<feed>`` of Splunk Atom entries.

    The OpenSearch paging counters are filled in when the server sends
    them; collection listings normally do.
    """

    title: Optional[str] = None
    id: Optional[str] = None
    updated: Optional[datetime] = None
    total_results: Optional[int] = None
    items_per_page: Optional[int] = None
    start_index: Optional[int] = None
    entries: List[AtomEntry] = Field(default_factory=list)

    @classmethod
    def from_element(cls, element: etree._Element) -> "AtomFeed":
        """Build a feed from its ``<feed>`` element.

        :raises InvalidOperationError: If ``element`` is not a feed
        """
        if not is_feed(element):
            raise InvalidOperationError(
                f"Expected an Atom feed, got <{local_name(element)}>"
            )
        return cls(
            title=_text(element, "title"),
            id=_text(element, "id"),
            updated=_text(element, "updated"),
            total_results=_text(element, "totalResults"),
            items_per_page=_text(element, "itemsPerPage"),
            start_index=_text(element, "startIndex"),
            entries=[
                AtomEntry.from_element(entry) for entry in _children(element, "entry")
            ],
        )


def read_entry(document: etree._Element) -> AtomEntry:
    """Return the single entry carried by ``document``.

    A feed yields its first entry; an entry yields itself.

    :param document: Root element of a feed or entry document
    :type document: etree._Element
    :return: The entry describing one resource
    :rtype: AtomEntry
    :raises InvalidOperationError: If a feed holds no entries
    """
    if is_feed(document):
        feed = AtomFeed.from_element(document)
        if not feed.entries:
            raise InvalidOperationError("Atom feed contains no entries")
        return feed.entries[0]
    return AtomEntry.from_element(document)
