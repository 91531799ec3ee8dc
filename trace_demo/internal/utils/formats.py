from collections.abc import Mapping
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Optional  # noqa:F401


_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def parse_tags_str(tags_str):
    # type: (Optional[str]) -> Dict[str, str]
    """Parse ``key:value`` pairs separated by commas, or by whitespace when
    the string holds no comma.

    A pair without ``:`` maps to an empty value and pairs without a key are
    skipped.

    >>> parse_tags_str("team:apm, tier:gold")
    {'team': 'apm', 'tier': 'gold'}
    """
    if not tags_str:
        return {}

    pairs = tags_str.split(",") if "," in tags_str else tags_str.split()
    tags = {}  # type: Dict[str, str]
    for pair in pairs:
        key, _, value = pair.strip().partition(":")
        key = key.strip()
        if key:
            tags[key] = value.strip()
    return tags


def flatten_key_value(root_key, value):
    # type: (str, Any) -> Dict[str, Any]
    """Flattens nested mappings and sequences into dotted keys.

    Sequence items are keyed by index, sets in sorted order.

    >>> flatten_key_value("custom", {"flags": ["a", "b"], "version": "1.0"})
    {'custom.flags.0': 'a', 'custom.flags.1': 'b', 'custom.version': '1.0'}
    """
    if isinstance(value, Mapping):
        items = value.items()
    elif isinstance(value, _SEQUENCE_TYPES):
        items = enumerate(sorted(value) if isinstance(value, (set, frozenset)) else value)
    else:
        return {root_key: value}

    flattened = {}  # type: Dict[str, Any]
    for k, item in items:
        flattened.update(flatten_key_value("%s.%s" % (root_key, k) if root_key else str(k), item))
    return flattened


def stringify_tags(tags):
    # type: (Mapping[str, Any]) -> Dict[str, str]
    """Tag values are sent as strings; ``None`` values are dropped."""
    return {str(k): v if isinstance(v, str) else str(v) for k, v in tags.items() if v is not None}
