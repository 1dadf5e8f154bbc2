"""Addressing models: namespaces and resource names.

A Splunk REST resource is addressed by an optional namespace (the
owner/app sharing context) and a resource name (the path segments
below ``/services`` or ``/servicesNS/{owner}/{app}``).
"""

from typing import Iterator, Tuple

from pydantic import BaseModel, ConfigDict, Field

WILDCARD = "-"


class Namespace(BaseModel):
    """Owner/app pair scoping a resource to a sharing context.

    :param owner: Owning user, or ``-`` for any user
    :type owner: str
    :param app: Owning app, or ``-`` for any app
    :type app: str
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1)
    app: str = Field(..., min_length=1)

    @property
    def is_specific(self) -> bool:
        """Whether the namespace names exactly one owner and one app.

        :return: True when neither owner nor app is the wildcard
        :rtype: bool
        """
        return self.owner != WILDCARD and self.app != WILDCARD

    def __str__(self) -> str:
        return f"{self.owner}/{self.app}"


class ResourceName(BaseModel):
    """Immutable sequence of path segments naming a resource.

    Build one with :meth:`of`, and extend a collection name with a
    title using :meth:`child`::

        >>> searches = ResourceName.of("saved", "searches")
        >>> str(searches.child("Errors in the last hour"))
        'saved/searches/Errors in the last hour'
    """

    model_config = ConfigDict(frozen=True)

    parts: Tuple[str, ...] = Field(..., min_length=1)

    @classmethod
    def of(cls, *parts: str) -> "ResourceName":
        return cls(parts=tuple(parts))

    def child(self, title: str) -> "ResourceName":
        """Return the name of ``title`` inside this collection."""
        return ResourceName(parts=self.parts + (title,))

    @property
    def title(self) -> str:
        return self.parts[-1]

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __str__(self) -> str:
        return "/".join(self.parts)
