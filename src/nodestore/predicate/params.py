from urllib.parse import parse_qsl

from werkzeug.datastructures import MultiDict
from werkzeug.wrappers import Request


def collect_parameters(source: Request | MultiDict | str | None) -> dict[str, list[str]]:
    """
    Flatten query parameters into a name -> values mapping.

    Accepts a request, its ``args`` MultiDict, or a raw query string. Values
    keep the order they were sent in and blank values are kept.
    """
    if source is None:
        return {}
    if isinstance(source, str):
        pairs = parse_qsl(source.lstrip("?"), keep_blank_values=True)
        source = MultiDict(pairs)
    elif not isinstance(source, MultiDict):
        source = source.args
    return {name: source.getlist(name) for name in source.keys()}
