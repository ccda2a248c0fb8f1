"""Copy-on-write edits that rebuild only the ancestors of the edited path."""
import logging

from uwiki import base
from uwiki import errors
from uwiki import types
from uwiki.data import ObjectStore
from uwiki.path import Path

logger = logging.getLogger(__name__)


def insert(store: ObjectStore, tree_oid: types.OID | None, path: Path, blob_oid: types.OID) -> types.OID:
    """Return the id of a tree where ``path`` is a file holding ``blob_oid``.

    ``path`` is consumed. ``tree_oid`` may be None for a directory that does not exist yet.
    """
    entries = base.get_tree(store, tree_oid)
    name = path.pop_first()
    entry = entries.get(name)

    if path.is_empty():
        if entry is None:
            mode = types.MODE_FILE
        elif entry.is_dir:
            raise errors.IsDir(f'{name.decode(errors="replace")} is a directory')
        elif entry.oid == blob_oid:
            raise errors.NoChange()
        else:
            mode = entry.mode  # keep e.g. the executable bit
        entries[name] = types.TreeEntry(oid=blob_oid, type_='blob', mode=mode)
    else:
        if entry is None:
            subtree = None
        elif not entry.is_dir:
            raise errors.CannotCreate(f'{name.decode(errors="replace")} is a file')
        else:
            subtree = entry.oid
        subtree = insert(store, subtree, path, blob_oid)
        entries[name] = types.TreeEntry(oid=subtree, type_='tree', mode=types.MODE_DIR)

    return base.write_tree(store, entries)


def remove(store: ObjectStore, tree_oid: types.OID, path: Path) -> tuple[types.OID | None, bool]:
    """Remove ``path`` (a file or a whole directory) below ``tree_oid``.

    Returns ``(new_tree, now_empty)``. When the removal leaves this level
    without entries nothing is written and ``(None, True)`` is returned so
    the caller drops this directory as well.
    """
    entries = base.get_tree(store, tree_oid)
    name = path.pop_first()
    entry = entries.get(name)
    if entry is None:
        raise errors.NotFound(f'{name.decode(errors="replace")} does not exist')

    if path.is_empty():
        del entries[name]
    else:
        if not entry.is_dir:
            raise errors.NotFound(f'{name.decode(errors="replace")} is not a directory')
        subtree, emptied = remove(store, entry.oid, path)
        if emptied:
            logger.debug('pruning empty directory %r', name)
            del entries[name]
        else:
            entries[name] = entry._replace(oid=subtree)

    if not entries:
        return None, True
    return base.write_tree(store, entries), False
