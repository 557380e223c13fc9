"""
Tests for the Node document mapping.

Run with: pytest src/nodestore/node/model_test.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from nodestore.conftest import make_node
from nodestore.node.model import Node


class TestToDocument:
    """Tests for Node.to_document()"""

    def test_document_shape(self):
        node = make_node(tags={"b", "a"}, touched_by={"zoe", "al"}, fields={"body": "Hi"})

        document = node.to_document()

        assert document == {
            "id": "n1",
            "name": "First",
            "slug": "first",
            "state": 1,
            "type": "page",
            "fields": {"body": "Hi"},
            "meta": {"color": "red"},
            "tags": ["a", "b"],
            "created_at": "2024-01-01T00:00:00+00:00",
            "created_by": None,
            "updated_at": "2024-01-01T00:00:00+00:00",
            "updated_by": None,
            "touched_by": ["al", "zoe"],
        }

    def test_timestamps_written_in_utc(self):
        node = make_node(
            created_at=datetime(2024, 1, 1, 2, tzinfo=timezone(timedelta(hours=2))),
            updated_at=datetime(2024, 1, 1, 3),
        )

        document = node.to_document()

        assert document["created_at"] == "2024-01-01T00:00:00+00:00"
        assert document["updated_at"] == "2024-01-01T03:00:00+00:00"


class TestFromDocument:
    """Tests for Node.from_document()"""

    def test_reads_stored_document(self):
        node = make_node(created_by="alice")

        assert Node.from_document(node.to_document()) == node

    def test_zulu_timestamps(self):
        node = Node.from_document({"name": "x", "created_at": "2024-05-01T10:00:00Z"})

        assert node.created_at == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)

    def test_partial_payload(self):
        node = Node.from_document({"name": "Home"})

        assert node.id is None
        assert node.tags == set()
        assert node.meta == {}
        assert node.created_at is not None

    @pytest.mark.parametrize(
        "payload",
        [
            {"created_at": "yesterday"},
            {"updated_at": 1704067200},
            {"tags": 5},
            {"tags": "red"},
            {"tags": [{"a": 1}]},
            {"touched_by": [1, 2]},
            {"meta": ["color"]},
            {"fields": "body"},
        ],
    )
    def test_malformed_payload_raises_value_error(self, payload):
        with pytest.raises(ValueError):
            Node.from_document({"name": "x", **payload})
