#!/usr/bin/env python3
"""nodestore CLI for searching and cleaning up nodes."""

import argparse

import questionary
from rich.console import Console
from rich.table import Table
from werkzeug.datastructures import MultiDict

from nodestore.errors import PredicateBuildError
from nodestore.node import Node, NodeRepository, customize_node_bindings
from nodestore.paging import Sort
from nodestore.predicate import BindingsFactory, PredicateBuilder, collect_parameters, describe

console = Console()


def build_predicate(filters: list[str]):
    """Turn ``key=value`` arguments into a node predicate, the way the search endpoint does."""
    parameters = collect_parameters(MultiDict(f.split("=", 1) for f in filters))
    descriptor = describe(Node)
    bindings = BindingsFactory().create_bindings_for(descriptor, customize_node_bindings)
    return PredicateBuilder().build(descriptor, parameters, bindings)


def render_nodes(nodes: list[Node]) -> Table:
    table = Table(title=f"{len(nodes)} node(s)")
    table.add_column("id", style="dim")
    table.add_column("name", style="bold")
    table.add_column("slug")
    table.add_column("type")
    table.add_column("state", justify="right")
    table.add_column("tags")
    for node in nodes:
        table.add_row(
            node.id,
            node.name or "",
            node.slug or "",
            node.type or "",
            "" if node.state is None else str(node.state),
            ", ".join(sorted(node.tags)),
        )
    return table


def search(filters: list[str], sort: list[str]):
    """Search nodes with query-string style filters."""
    bad = [f for f in filters if "=" not in f]
    if bad:
        console.print(f"[red]Filters must look like key=value: {', '.join(bad)}[/]")
        return

    try:
        predicate = build_predicate(filters)
    except PredicateBuildError as e:
        console.print(f"[red]{e}[/]")
        return

    nodes = NodeRepository().search(predicate, Sort.parse(sort))
    console.print(render_nodes(nodes))


def delete():
    """Pick a node and delete it."""
    repo = NodeRepository()
    nodes = repo.find_all(limit=50)
    if not nodes:
        console.print("[red]No nodes found.[/]")
        return

    selected = questionary.select(
        "Select a node:",
        choices=[questionary.Choice(title=f"{n.name} ({n.id})", value=n) for n in nodes],
    ).ask()

    # User pressed Ctrl+C or Escape
    if selected is None:
        console.print("[dim]Cancelled.[/]")
        return

    console.print(f"[yellow]Will delete node [bold]{selected.name}[/] ({selected.id}).[/]")
    if not questionary.confirm("Proceed with these changes?").ask():
        console.print("[dim]Cancelled.[/]")
        return

    repo.delete_by_id(selected.id)
    console.print(f"[green]Deleted {selected.name}.[/]")


def main():
    parser = argparse.ArgumentParser(description="nodestore CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Search nodes")
    search_parser.add_argument("filters", nargs="*", help="Filters as key=value")
    search_parser.add_argument("--sort", action="append", default=[], help="property[,asc|desc]")
    subparsers.add_parser("delete", help="Select and delete a node")

    args = parser.parse_args()

    if args.command == "search":
        search(args.filters, args.sort)
    elif args.command == "delete":
        delete()


if __name__ == "__main__":
    main()
