import time
import logging
from typing import Iterator

from uwiki import errors
from uwiki import types
from uwiki.data import ObjectStore

logger = logging.getLogger(__name__)

AUTHOR = types.Signature(name='uwiki', email='uwiki@uwiki')
ROOT_COMMIT_MESSAGE = 'Root commit'


def write_tree(store: ObjectStore, entries: types.Tree) -> types.OID:
    tree = b''.join(f'{entry.mode:o} {entry.type_} {entry.oid} '.encode() + name + b'\x00'
                    for name, entry in sorted(entries.items()))
    return store.hash_object(tree, 'tree')


def get_tree(store: ObjectStore, oid: types.OID | None) -> types.Tree:
    """Read one level of a tree. ``None`` stands for the empty tree."""
    entries = {}
    if not oid:
        return entries
    tree = store.get_object(oid, 'tree')
    for record in tree.split(b'\x00')[:-1]:
        try:
            mode, type_, entry_oid, name = record.split(b' ', 3)
            type_ = type_.decode()
            entry = types.TreeEntry(oid=entry_oid.decode('ascii'), type_=type_, mode=int(mode, 8))
        except (ValueError, UnicodeDecodeError) as e:
            raise errors.StoreError(f'malformed entry in tree {oid}') from e
        if type_ not in ('blob', 'tree'):
            raise errors.StoreError(f'unknown entry type {type_} in tree {oid}')
        entries[name] = entry
    return entries


def _parse_author(value: str) -> tuple[types.Signature, int]:
    ident, timestamp, _tz = value.rsplit(' ', 2)
    name, _, email = ident.partition(' <')
    return types.Signature(name=name, email=email.rstrip('>')), int(timestamp)


def get_commit(store: ObjectStore, oid: types.OID) -> types.Commit:
    parent = None
    tree = None
    author = None
    timestamp = 0
    try:
        # headers end at the first empty line, the message follows verbatim
        headers, sep, message = store.get_object(oid, 'commit').decode().partition('\n\n')
        if not sep:
            raise errors.StoreError(f'commit {oid} has no message')
        for line in headers.split('\n'):
            key, value = line.split(' ', 1)
            if key == 'tree':
                tree = value
            elif key == 'parent':
                parent = value
            elif key == 'author':
                author, timestamp = _parse_author(value)
            else:
                raise errors.StoreError(f'unknown field {key} in commit {oid}')
    except (ValueError, UnicodeDecodeError) as e:
        raise errors.StoreError(f'commit {oid} is malformed') from e

    if tree is None or author is None:
        raise errors.StoreError(f'commit {oid} is incomplete')
    return types.Commit(tree=tree, parent=parent, message=message.removesuffix('\n'),
                        author=author, timestamp=timestamp)


def write_commit(store: ObjectStore, tree: types.OID, parent: types.OID | None, message: str,
                 author: types.Signature, timestamp: int | None = None) -> types.OID:
    if timestamp is None:
        timestamp = int(time.time())
    commit_ = f'tree {tree}\n'
    if parent:
        commit_ += f'parent {parent}\n'
    commit_ += f'author {author} {timestamp} +0000\n'
    commit_ += '\n'
    commit_ += f'{message}\n'
    return store.hash_object(commit_.encode(), 'commit')


def iter_commits(store: ObjectStore, oid: types.OID | None) -> Iterator[tuple[types.OID, types.Commit]]:
    visited = set()
    while oid and oid not in visited:
        visited.add(oid)
        commit_ = get_commit(store, oid)
        yield oid, commit_
        oid = commit_.parent


class CommitManager:
    """Owns the head pointer: resolves it and moves it forward one commit at a time."""

    def __init__(self, store: ObjectStore, author: types.Signature = AUTHOR):
        self.store = store
        self.author = author

    def head_oid(self) -> types.OID:
        oid = self.store.get_ref('HEAD').value
        if oid is None:
            self._bootstrap()
            oid = self.store.get_ref('HEAD').value
        return oid

    def head(self) -> types.Commit:
        return get_commit(self.store, self.head_oid())

    def _bootstrap(self):
        # An unborn branch gets a parentless commit of the empty tree.
        tree = write_tree(self.store, {})
        oid = write_commit(self.store, tree, None, ROOT_COMMIT_MESSAGE, AUTHOR)
        self.store.update_ref('HEAD', types.RefValue(symbolic=False, value=oid))
        logger.info('created root commit %s', oid)

    def publish(self, tree: types.OID, message: str, parent: types.OID | None = None) -> types.OID:
        if parent is None:
            parent = self.head_oid()
        oid = write_commit(self.store, tree, parent, message, self.author)
        self.store.update_ref('HEAD', types.RefValue(symbolic=False, value=oid))
        logger.info('committed %s on top of %s: %s', oid[:10], parent[:10], message.splitlines()[0] if message else '')
        return oid
