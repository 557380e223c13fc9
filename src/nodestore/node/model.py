from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from nodestore.predicate.model import as_utc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Not an ISO 8601 timestamp: {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _mapping(value, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be an object")
    return dict(value)


def _string_set(value, name: str) -> set[str]:
    if value is None:
        return set()
    if not isinstance(value, (list, tuple, set)) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{name} must be a list of strings")
    return set(value)


@dataclass
class Node:
    """
    A node document.

    ``fields`` holds the node's content and ``meta`` free-form metadata;
    both are stored as nested objects inside the document.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    state: Optional[int] = None
    type: Optional[str] = None
    fields: dict[str, Any] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    tags: set[str] = field(default_factory=set)
    created_at: datetime = field(default_factory=utcnow)
    created_by: Optional[str] = None
    updated_at: datetime = field(default_factory=utcnow)
    updated_by: Optional[str] = None
    touched_by: set[str] = field(default_factory=set)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON document stored in the nodes table."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "state": self.state,
            "type": self.type,
            "fields": dict(self.fields),
            "meta": dict(self.meta),
            "tags": sorted(self.tags),
            "created_at": as_utc(self.created_at).isoformat() if self.created_at else None,
            "created_by": self.created_by,
            "updated_at": as_utc(self.updated_at).isoformat() if self.updated_at else None,
            "updated_by": self.updated_by,
            "touched_by": sorted(self.touched_by),
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Node":
        """
        Build a node from a stored document or a request payload.

        Raises:
            ValueError: if a field has the wrong shape or a timestamp is not ISO 8601
        """
        node = cls(
            id=document.get("id"),
            name=document.get("name"),
            slug=document.get("slug"),
            state=document.get("state"),
            type=document.get("type"),
            fields=_mapping(document.get("fields"), "fields"),
            meta=_mapping(document.get("meta"), "meta"),
            tags=_string_set(document.get("tags"), "tags"),
            created_by=document.get("created_by"),
            updated_by=document.get("updated_by"),
            touched_by=_string_set(document.get("touched_by"), "touched_by"),
        )
        if document.get("created_at"):
            node.created_at = _parse_datetime(document["created_at"])
        if document.get("updated_at"):
            node.updated_at = _parse_datetime(document["updated_at"])
        return node
