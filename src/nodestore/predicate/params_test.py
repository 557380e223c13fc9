"""
Tests for query parameter collection.

Run with: pytest src/nodestore/predicate/params_test.py -v
"""

import pytest
from flask import Flask, request
from werkzeug.datastructures import MultiDict

from nodestore.predicate.params import collect_parameters


class TestCollectParameters:
    """Tests for collect_parameters()"""

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("", {}),
            ("name=home", {"name": ["home"]}),
            ("?name=home", {"name": ["home"]}),
            ("tag=a&tag=b&state=1", {"tag": ["a", "b"], "state": ["1"]}),
            ("tag=b&tag=a", {"tag": ["b", "a"]}),
            ("name=", {"name": [""]}),
            ("Name=x&name=y", {"Name": ["x"], "name": ["y"]}),
            ("name=Home%20Page&meta.color=r%C3%A9d", {"name": ["Home Page"], "meta.color": ["réd"]}),
            ("q=a+b", {"q": ["a b"]}),
        ],
    )
    def test_query_string(self, query, expected):
        assert collect_parameters(query) == expected

    def test_none(self):
        assert collect_parameters(None) == {}

    def test_multidict(self):
        args = MultiDict([("tag", "a"), ("state", "1"), ("tag", "b")])

        assert collect_parameters(args) == {"tag": ["a", "b"], "state": ["1"]}

    def test_request(self):
        app = Flask(__name__)

        with app.test_request_context("/search?tag=a&tag=b&name=x"):
            result = collect_parameters(request)

        assert result == {"tag": ["a", "b"], "name": ["x"]}

    def test_request_without_query_string(self):
        app = Flask(__name__)

        with app.test_request_context("/search"):
            assert collect_parameters(request) == {}
