from collections import defaultdict
from typing import Iterable, TypeAlias, Literal

from . import base
from . import types
from .data import ObjectStore


def flatten_tree(store: ObjectStore, oid: types.OID | None, base_path: bytes = b'') -> types.TreeMap:
    result = {}
    for name, entry in base.get_tree(store, oid).items():
        path = base_path + name
        if entry.is_dir:
            result.update(flatten_tree(store, entry.oid, path + b'/'))
        else:
            result[path] = entry.oid
    return result


def compare_trees(*trees: types.TreeMap) -> Iterable[tuple[bytes, list[types.OID | None]]]:
    entries = defaultdict(lambda: [None] * len(trees))
    for i, tree in enumerate(trees):
        for path, oid in tree.items():
            entries[path][i] = oid

    for path in sorted(entries):
        yield path, entries[path]


Action: TypeAlias = Literal['new_file', 'deleted', 'modified']


def iter_changed_files(t_from: types.TreeMap, t_to: types.TreeMap) -> Iterable[tuple[bytes, Action]]:
    for path, (o_from, o_to) in compare_trees(t_from, t_to):
        if o_from != o_to:
            action = ('new_file' if not o_from else
                      'deleted' if not o_to else
                      'modified')
            yield path, action
