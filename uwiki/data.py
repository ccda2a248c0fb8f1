import os
import string
import hashlib
import logging
import tempfile
from contextlib import contextmanager, suppress

from uwiki import errors
from uwiki import types
from uwiki.types import RefValue

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = 'refs/heads/master'


@contextmanager
def io_errors(action):
    try:
        yield
    except OSError as e:
        logger.error('%s failed: %s', action, e)
        raise errors.StorageIOError(f'{action} failed: {e}') from e


def _write_file(path, content: bytes):
    # The file only appears under its final name once it is complete.
    dirname = os.path.dirname(path)
    os.makedirs(dirname, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=dirname, prefix='.tmp-')
    try:
        with os.fdopen(fd, 'wb') as out:
            out.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        with suppress(OSError):
            os.remove(tmp_path)
        raise


class ObjectStore:
    """A bare repository on disk: loose objects plus refs."""

    def __init__(self, git_dir):
        self.git_dir = os.fspath(git_dir)

    def __repr__(self):
        return f'ObjectStore({self.git_dir!r})'

    def init(self):
        with io_errors(f'initializing {self.git_dir}'):
            os.makedirs(f'{self.git_dir}/objects', exist_ok=True)
            os.makedirs(f'{self.git_dir}/refs/heads', exist_ok=True)
            initialized = os.path.isfile(f'{self.git_dir}/HEAD')
        if not initialized:
            self.update_ref('HEAD', RefValue(symbolic=True, value=DEFAULT_BRANCH), deref=False)
            logger.info('initialized empty repository in %s', self.git_dir)

    def _object_path(self, oid):
        if len(oid) != 40 or not all(c in string.hexdigits for c in oid):
            raise errors.StoreError(f'malformed object id {oid!r}')
        return f'{self.git_dir}/objects/{oid}'

    def hash_object(self, data: bytes, type_: types.ObjectType = 'blob') -> types.OID:
        obj = type_.encode() + b'\x00' + data
        oid = hashlib.sha1(obj).hexdigest()
        path = self._object_path(oid)
        with io_errors(f'writing {type_} {oid}'):
            if os.path.isfile(path):
                return oid
            _write_file(path, obj)
        logger.debug('wrote %s %s (%d bytes)', type_, oid, len(data))
        return oid

    def read_object(self, oid: types.OID) -> tuple[str, bytes]:
        path = self._object_path(oid)
        with io_errors(f'reading object {oid}'):
            try:
                with open(path, 'rb') as f:
                    obj = f.read()
            except FileNotFoundError:
                raise errors.StoreError(f'object {oid} is missing') from None

        type_, sep, content = obj.partition(b'\x00')
        if not sep:
            raise errors.StoreError(f'object {oid} is corrupt')
        return type_.decode(), content

    def get_object(self, oid: types.OID, expected: types.ObjectType | None = 'blob') -> bytes:
        type_, content = self.read_object(oid)
        if expected is not None and type_ != expected:
            raise errors.StoreError(f'expected {expected} for {oid}, got {type_}')
        return content

    def update_ref(self, ref, value: RefValue, deref=True):
        ref = self._get_ref_internal(ref, deref)[0]

        assert value.value
        if value.symbolic:
            content = f'ref: {value.value}\n'
        else:
            content = f'{value.value}\n'
        with io_errors(f'updating {ref}'):
            _write_file(f'{self.git_dir}/{ref}', content.encode())
        logger.debug('%s -> %s', ref, value.value)

    def get_ref(self, ref, deref=True) -> RefValue:
        return self._get_ref_internal(ref, deref)[1]

    def _get_ref_internal(self, ref: str, deref: bool) -> tuple[str, RefValue]:
        ref_path = f'{self.git_dir}/{ref}'
        value = None
        with io_errors(f'reading {ref}'):
            if os.path.isfile(ref_path):
                with open(ref_path) as f:
                    value = f.read().strip()

        symbolic = bool(value) and value.startswith('ref:')
        if symbolic:
            value = value.split(':', 1)[1].strip()
            if deref:
                return self._get_ref_internal(value, deref=True)
        return ref, RefValue(symbolic=symbolic, value=value or None)
