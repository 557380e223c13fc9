from nodestore.predicate import Operator, QueryBindings


def customize_node_bindings(bindings: QueryBindings) -> None:
    """Query parameters accepted by the node search endpoint, on top of the field defaults."""
    # non-numeric state is answered with 400
    bindings.bind("state", required=True)
    bindings.bind("tag", path="tags")
    bindings.bind("name_contains", path="name", operator=Operator.ICONTAINS)
    bindings.bind("created_after", path="created_at", operator=Operator.GTE)
    bindings.bind("created_before", path="created_at", operator=Operator.LT)
    bindings.bind("updated_after", path="updated_at", operator=Operator.GTE)
    bindings.exclude("created_by", "updated_by")
