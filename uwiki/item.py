"""Repository and Item, the API the wiki server talks to.

Writers are not serialized: concurrent mutating calls need an external lock.
"""
import logging
import os
from typing import Iterator

from uwiki import base
from uwiki import diff
from uwiki import errors
from uwiki import tree
from uwiki import types
from uwiki.data import ObjectStore
from uwiki.path import Path

logger = logging.getLogger(__name__)

# Directories are served through this file, see Path.percent_encode for redirects.
INDEX_FILE = b'index.md'


def _as_path(path) -> Path:
    if isinstance(path, Path):
        return path.copy()
    if isinstance(path, bytes):
        return Path.from_bytes(path)
    if isinstance(path, str):
        return Path.from_str(path)
    raise TypeError(f'expected Path, str or bytes, got {type(path).__name__}')


class Repository:

    def __init__(self, directory, author: types.Signature | None = None):
        self.directory = os.fspath(directory)
        self.store = ObjectStore(self.directory)
        self.store.init()
        self.commits = base.CommitManager(self.store, author or base.AUTHOR)

    def __repr__(self):
        return f'Repository({self.directory!r})'

    def item(self, path=()) -> 'Item':
        if isinstance(path, tuple):
            path = Path(path)
        return Item(self, _as_path(path))

    def head(self) -> types.OID:
        return self.commits.head_oid()

    def log(self, start: types.OID | None = None) -> Iterator[tuple[types.OID, types.Commit]]:
        yield from base.iter_commits(self.store, start or self.head())

    def changes(self, commit: types.OID | None = None) -> list[tuple[Path, diff.Action]]:
        """Files added, modified or deleted by ``commit`` (default: head) relative to its parent."""
        commit_ = base.get_commit(self.store, commit or self.head())
        parent_tree = base.get_commit(self.store, commit_.parent).tree if commit_.parent else None
        return [(Path.from_bytes(path), action)
                for path, action in diff.iter_changed_files(diff.flatten_tree(self.store, parent_tree),
                                                            diff.flatten_tree(self.store, commit_.tree))]


class Item:

    def __init__(self, repo: Repository, path: Path):
        self.repo = repo
        self._path = path

    @property
    def path(self) -> Path:
        return self._path.copy()

    def __repr__(self):
        return f'Item({str(self._path)!r})'

    def __eq__(self, other):
        if not isinstance(other, Item):
            return NotImplemented
        return self.repo is other.repo and self._path == other._path

    def __hash__(self):
        return hash(self._path)

    def is_root(self) -> bool:
        return self._path.is_empty()

    def parent(self) -> 'Item':
        return Item(self.repo, self._path.parent())

    def _object(self) -> tuple[types.EntryType, types.OID]:
        if self.is_root():
            return 'tree', self.repo.commits.head().tree

        type_, oid = self.parent()._object()
        if type_ != 'tree':
            raise errors.NotFound(f'{self._path} does not exist')
        entry = base.get_tree(self.repo.store, oid).get(self._path.filename())
        if entry is None:
            raise errors.NotFound(f'{self._path} does not exist')
        return entry.type_, entry.oid

    def exists(self) -> bool:
        try:
            self._object()
        except errors.NotFound:
            return False
        return True

    def is_dir(self) -> bool:
        return self._object()[0] == 'tree'

    def is_file(self) -> bool:
        return self._object()[0] == 'blob'

    def can_exist(self) -> bool:
        """Whether a file could be created here, i.e. no ancestor is a file."""
        if len(self._path) <= 1:
            return True
        parent = self.parent()
        if parent.exists():
            return parent.is_dir()
        return parent.can_exist()

    def content(self) -> bytes:
        type_, oid = self._object()
        if type_ != 'blob':
            raise errors.IsDir(f'{self._path} is a directory')
        return self.repo.store.get_object(oid, 'blob')

    def list(self) -> list['Item']:
        type_, oid = self._object()
        if type_ != 'tree':
            raise errors.IsFile(f'{self._path} is a file')
        return [Item(self.repo, self._path.child(name))
                for name in base.get_tree(self.repo.store, oid)]

    def edit(self, content: bytes, message: str) -> types.OID:
        if self.is_root():
            raise errors.IsDir('the root is a directory')
        # The blob is written before the tree is checked; it is left behind on conflicts.
        blob = self.repo.store.hash_object(content, 'blob')

        head = self.repo.commits.head_oid()
        head_tree = base.get_commit(self.repo.store, head).tree
        new_tree = tree.insert(self.repo.store, head_tree, self.path, blob)
        logger.debug('edit %s: tree %s -> %s', self._path, head_tree, new_tree)
        return self.repo.commits.publish(new_tree, message, parent=head)

    def remove(self, message: str) -> types.OID:
        if self.is_root():
            raise errors.RootNotRemovable()

        head = self.repo.commits.head_oid()
        head_tree = base.get_commit(self.repo.store, head).tree
        new_tree, now_empty = tree.remove(self.repo.store, head_tree, self.path)
        if now_empty:
            new_tree = base.write_tree(self.repo.store, {})
        logger.debug('remove %s: tree %s -> %s', self._path, head_tree, new_tree)
        return self.repo.commits.publish(new_tree, message, parent=head)
