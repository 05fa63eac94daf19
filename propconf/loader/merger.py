"""Property set merging with precedence support.

All merges are right-biased unions over string maps: later maps win on key
collision. Imports use the reverse rule, the first import supplied by the
caller has the highest precedence among imports.
"""

from collections.abc import Mapping, Sequence

from ..utils.converter import to_property_map


def merge(base: Mapping[str, str], *overrides: Mapping[str, str]) -> dict[str, str]:
    """Apply each override onto a copy of ``base`` in argument order.

    Args:
        base: Lowest precedence properties
        *overrides: Property maps, each winning over everything before it

    Returns:
        New merged dictionary, inputs are left untouched
    """
    result = dict(base)
    for override in overrides:
        result.update(override)
    return result


def merge_imports(imports: Sequence[Mapping]) -> dict[str, str]:
    """Merge caller supplied import maps.

    Imports are applied last-to-first, so for ``(a, b)`` a key present in
    both keeps the value from ``a``. Non-string keys and values are
    converted to their property string form.
    """
    return merge({}, *(to_property_map(imported) for imported in reversed(imports)))


def changed_keys(old: Mapping[str, str], new: Mapping[str, str]) -> set[str]:
    """Return keys added, removed or modified between two property sets."""
    changed = set(old.keys() ^ new.keys())
    changed.update(key for key in old.keys() & new.keys() if old[key] != new[key])
    return changed
