"""
Node

This package provides the node document, its repository and service, and
the query bindings used to search nodes.
"""

from nodestore.node.bindings import customize_node_bindings
from nodestore.node.model import Node
from nodestore.node.repository import NodeRepository
from nodestore.node.service import NodeService

__all__ = ["Node", "NodeRepository", "NodeService", "customize_node_bindings"]
