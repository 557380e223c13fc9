from typing import List, Optional

from psycopg.types.json import Jsonb

from nodestore import db
from nodestore.node.model import Node
from nodestore.paging import UNSORTED, Sort
from nodestore.predicate import IDENTITY, Predicate
from nodestore.predicate.sql import compile_predicate


def _order_by(sort: Sort) -> tuple[str, list]:
    if not sort.is_sorted:
        return " ORDER BY id", []
    fragments, params = [], []
    for order in sort.orders:
        fragments.append(f"(document #>> %s::text[]) {order.direction.value.upper()}")
        params.append(order.property.split("."))
    return " ORDER BY " + ", ".join(fragments) + ", id", params


class NodeRepository:
    """
    Repository for node documents.
    Encapsulates all SQL and queries for the nodes table.
    """

    def save(self, node: Node) -> Node:
        """Insert a node, or replace the stored document if the id exists."""
        row = db.fetch_one(
            """
            INSERT INTO nodes (id, document)
            VALUES (%s, %s)
            ON CONFLICT (id) DO UPDATE SET document = EXCLUDED.document
            RETURNING document
            """,
            (node.id, Jsonb(node.to_document())),
        )
        return Node.from_document(row["document"])

    def find_by_id(self, node_id: str) -> Optional[Node]:
        """Get a node by ID."""
        row = db.fetch_one("SELECT document FROM nodes WHERE id = %s", (node_id,))
        return Node.from_document(row["document"]) if row else None

    def find_all(self, sort: Sort = UNSORTED, limit: int = None, offset: int = 0) -> List[Node]:
        """List nodes in sort order, optionally one slice at a time."""
        return self.search(IDENTITY, sort, limit=limit, offset=offset)

    def search(
        self,
        predicate: Predicate,
        sort: Sort = UNSORTED,
        limit: int = None,
        offset: int = 0,
    ) -> List[Node]:
        """List the nodes matching a predicate."""
        where, params = compile_predicate(predicate)
        order_by, order_params = _order_by(sort)
        query = f"SELECT document FROM nodes WHERE {where}{order_by}"
        params = params + order_params

        if limit is not None:
            query += " LIMIT %s OFFSET %s"
            params += [limit, offset]

        rows = db.fetch_all(query, tuple(params))
        return [Node.from_document(row["document"]) for row in rows]

    def count(self, predicate: Predicate = IDENTITY) -> int:
        """Count the nodes matching a predicate, all nodes by default."""
        where, params = compile_predicate(predicate)
        return db.fetch_value(f"SELECT COUNT(*) FROM nodes WHERE {where}", tuple(params), default=0)

    def delete_by_id(self, node_id: str) -> bool:
        """Delete a node. Returns whether a row was removed."""
        return db.execute("DELETE FROM nodes WHERE id = %s", (node_id,)) > 0
