import uuid
from typing import Any, List, Optional

import structlog
from psycopg.errors import UniqueViolation

from nodestore.errors import BadRequestAlertError
from nodestore.node.model import Node, utcnow
from nodestore.node.repository import NodeRepository
from nodestore.paging import UNSORTED, Page, Pageable, Sort
from nodestore.predicate import all_of, meta_predicates

logger = structlog.get_logger(__name__)

ENTITY_NAME = "node"


class NodeService:
    """
    Node lifecycle rules on top of NodeRepository: id assignment, audit
    timestamps and payload checks.
    """

    def __init__(self):
        self.repository = NodeRepository()

    def create(self, node: Node) -> Node:
        """Create a new node with a generated ID."""
        if node.id is not None:
            raise BadRequestAlertError("A new node cannot already have an ID", ENTITY_NAME, "idexists")
        if not node.name:
            raise BadRequestAlertError("A node needs a name", ENTITY_NAME, "namenull")

        now = utcnow()
        node.id = uuid.uuid4().hex
        node.created_at = now
        node.updated_at = now
        return self._save(node)

    def update(self, node: Node) -> Optional[Node]:
        """
        Replace an existing node.

        Creation audit fields are kept from the stored node.
        Returns None when no node has the given ID.
        """
        if node.id is None:
            raise BadRequestAlertError("Invalid id", ENTITY_NAME, "idnull")
        if not node.name:
            raise BadRequestAlertError("A node needs a name", ENTITY_NAME, "namenull")

        existing = self.repository.find_by_id(node.id)
        if existing is None:
            return None

        node.created_at = existing.created_at
        node.created_by = existing.created_by
        node.updated_at = utcnow()
        return self._save(node)

    def _save(self, node: Node) -> Node:
        try:
            return self.repository.save(node)
        except UniqueViolation as e:
            logger.info("rejected duplicate slug", slug=node.slug)
            raise BadRequestAlertError("Slug is already in use", ENTITY_NAME, "slugexists") from e

    def list(self, pageable: Pageable) -> Page[Node]:
        """One page of nodes plus the total count."""
        content = self.repository.find_all(
            pageable.sort, limit=pageable.size, offset=pageable.offset
        )
        return Page(content=content, pageable=pageable, total=self.repository.count())

    def find_by_meta(self, meta: dict[str, Any], sort: Sort = UNSORTED) -> List[Node]:
        """Nodes whose metadata equals every ``meta.*`` entry given."""
        predicate = all_of(meta_predicates(None, meta))
        return self.repository.search(predicate, sort)
