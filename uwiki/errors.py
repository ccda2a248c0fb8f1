"""Every failure the store reports is a WikiError subclass."""


class WikiError(Exception):
    default_message = 'wiki error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class NotFound(WikiError):
    default_message = 'not found'


class NoParent(WikiError):
    default_message = 'the root path has no parent'


class IsDir(WikiError):
    default_message = 'is a directory'


class IsFile(WikiError):
    default_message = 'is a file'


class CannotCreate(WikiError):
    default_message = 'a file is in the way of this path'


class NoChange(WikiError):
    """Raised when an edit would store the content that is already there."""
    default_message = 'content is unchanged, nothing to commit'


class InvalidPath(WikiError):
    default_message = 'invalid path'


class RootNotRemovable(WikiError):
    default_message = 'the root directory can not be removed'


class StoreError(WikiError):
    """A missing, corrupt or mis-typed object or ref."""
    default_message = 'object store error'


class StorageIOError(WikiError):
    """Wraps an OSError raised while reading or writing the repository."""
    default_message = 'storage I/O error'
