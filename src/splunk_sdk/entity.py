"""Entities: cached local views of single Splunk REST resources.

An :class:`Entity` is identified by its context, namespace, collection
and title. Its :attr:`~Entity.record` holds the content mapping of the
resource as last fetched from the server and is ``None`` until the
first :meth:`~Entity.refresh`. A refresh replaces the record as a
whole; it never merges into the previous one.

The title and resource name are fixed when the entity is built. A
refresh that reports a different title leaves both unchanged.

Typed access goes through :func:`get_value`, which converts a raw
record value once and writes the converted value back, so later reads
of the same field skip the conversion.

Refreshes are not serialized. Two concurrent :meth:`~Entity.refresh`
calls on one entity race, and whichever finishes last wins.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, TypeVar

from pydantic import ValidationError

from .converters import ValueConverter
from .exceptions import ArgumentError, InvalidOperationError, RequestError
from .models.atom import AtomEntry, AtomFeed, read_entry
from .models.namespace import Namespace, ResourceName
from .utils.http import async_retry

logger = logging.getLogger(__name__)

REFRESH_ATTEMPTS = 3
REFRESH_DELAY = 0.5
NO_CONTENT = 204

V = TypeVar("V")
Record = Dict[str, Any]


def _is_no_content(error: Exception) -> bool:
    return isinstance(error, RequestError) and error.status_code == NO_CONTENT


def get_value(record: Optional[Record], name: str, converter: ValueConverter[V]) -> V:
    """Read a typed value from ``record``.

    :param record: The record to read from
    :type record: Optional[Record]
    :param name: Field name
    :type name: str
    :param converter: Converter producing the typed value
    :type converter: ValueConverter[V]
    :return: ``converter.default_value`` if the field is absent or
             empty; the stored value if it already has the target
             type; otherwise the converted value, which is also stored
             back into ``record`` under ``name``
    :raises InvalidOperationError: If ``record`` is ``None``
    :raises ConversionError: If the stored value cannot be converted
    """
    if record is None:
        raise InvalidOperationError(
            f"Cannot read {name!r}: the record has not been fetched"
        )
    value = record.get(name)
    # An empty <s:key/> parses to None and is never handed to the converter
    if value is None:
        return converter.default_value
    if converter.is_converted(value):
        return value

    converted = converter.convert(value)
    record[name] = converted
    return converted


class Entity:
    """Local cached representation of one remote resource.

    Subclasses that key their identity on a field other than ``title``
    override :meth:`resolve_title`.

    :param context: Transport used to fetch the resource
    :type context: Context
    :param namespace: Specific namespace holding the resource
    :type namespace: Namespace
    :param collection: Name of the collection holding the resource
    :type collection: ResourceName
    :param title: Title of the resource within ``collection``
    :type title: str
    :raises ArgumentError: If an argument is missing or empty, or the
                           namespace is not specific
    """

    def __init__(self, context, namespace: Namespace, collection: ResourceName, title: str):
        if context is None:
            raise ArgumentError("context is required", argument="context")
        if namespace is None:
            raise ArgumentError("namespace is required", argument="namespace")
        if collection is None:
            raise ArgumentError("collection is required", argument="collection")
        if not title:
            raise ArgumentError("title must be a non-empty string", argument="title")
        if not namespace.is_specific:
            raise ArgumentError(
                f"namespace {namespace} must name a single owner and app",
                argument="namespace",
            )

        self.context = context
        self.namespace = namespace
        self.collection = collection
        self.title = title
        self.resource_name = collection.child(title)
        self.record: Optional[Record] = None

    @classmethod
    def materialize(cls, context, collection: ResourceName, entry: AtomEntry):
        """Build an entity from an Atom entry that is already parsed.

        Used for the members of a collection listing. The record is the
        entry's content; the title comes from :meth:`resolve_title` and
        the namespace from the record's ``eai.acl`` owner and app.

        :param context: Transport used for later refreshes
        :param collection: Name of the collection holding the entry
        :type collection: ResourceName
        :param entry: Parsed Atom entry
        :type entry: AtomEntry
        :return: A new entity of type ``cls``
        :raises ArgumentError: If any argument is ``None``
        :raises InvalidOperationError: If the record lacks a title or ACL
        """
        if context is None:
            raise ArgumentError("context is required", argument="context")
        if collection is None:
            raise ArgumentError("collection is required", argument="collection")
        if entry is None:
            raise ArgumentError("entry is required", argument="entry")

        record = entry.content
        entity = cls.__new__(cls)
        entity.context = context
        entity.collection = collection
        entity.record = record

        title = entity.resolve_title(record)
        if not title:
            raise InvalidOperationError(
                f"Entry in {collection} has no title for {cls.__name__}"
            )
        entity.title = title
        entity.resource_name = collection.child(title)

        try:
            acl = record["eai"]["acl"]
            entity.namespace = Namespace(owner=acl["owner"], app=acl["app"])
        except (KeyError, TypeError, ValidationError) as exc:
            raise InvalidOperationError(
                f"Entry {collection}/{title} has no eai:acl owner and app"
            ) from exc

        return entity

    @classmethod
    async def fetch_all(
        cls,
        context,
        namespace: Namespace,
        collection: ResourceName,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List["Entity"]:
        """Fetch a collection listing and materialize each member.

        :param context: Transport to fetch with
        :param namespace: Namespace to list; wildcards are allowed
        :type namespace: Namespace
        :param collection: Name of the collection
        :type collection: ResourceName
        :param params: Optional query parameters, e.g. ``{"count": 0}``
        :type params: Optional[Mapping[str, Any]]
        :return: One entity of type ``cls`` per entry
        :rtype: List[Entity]
        """
        document = await context.get_document(namespace, collection, params)
        feed = AtomFeed.from_element(document)
        logger.debug("Listed %d entries in %s", len(feed.entries), collection)
        return [cls.materialize(context, collection, entry) for entry in feed.entries]

    def resolve_title(self, record: Record) -> Optional[str]:
        """Return the title of the resource described by ``record``."""
        return record.get("title")

    def get_value(self, name: str, converter: ValueConverter[V]) -> V:
        """Read a typed value from :attr:`record`; see :func:`get_value`."""
        return get_value(self.record, name, converter)

    async def refresh(self) -> None:
        """Refresh the cached state of the entity.

        Makes up to ``REFRESH_ATTEMPTS`` attempts. A ``204 No Content``
        answer means the resource state is still being produced; the
        attempt is retried after ``REFRESH_DELAY`` seconds. Any other
        error propagates at once. On failure the record is left as it
        was.

        :raises RequestError: The last 204 error once attempts run out,
                              or any other request error immediately
        """
        self.record = await self._fetch_record()
        logger.debug("Refreshed %s", self)

    @async_retry(
        max_attempts=REFRESH_ATTEMPTS,
        delay=REFRESH_DELAY,
        exceptions=(RequestError,),
        retry_if=_is_no_content,
    )
    async def _fetch_record(self) -> Record:
        # A specific namespace guarantees a single matching entry.
        document = await self.context.get_document(self.namespace, self.resource_name)
        return read_entry(document).content

    def __str__(self) -> str:
        return "/".join(
            (str(self.context), str(self.namespace), str(self.collection), self.title)
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"
