from typing import TypeAlias, NamedTuple, Literal

OID: TypeAlias = str  # hash
Segment: TypeAlias = bytes  # a single name inside a tree
ObjectType: TypeAlias = Literal['blob', 'tree', 'commit']
EntryType: TypeAlias = Literal['blob', 'tree']
TreeMap: TypeAlias = dict[bytes, OID]  # flattened path -> blob

MODE_FILE = 0o100644
MODE_EXECUTABLE = 0o100755
MODE_DIR = 0o040000


class TreeEntry(NamedTuple):
    oid: OID
    type_: EntryType
    mode: int

    @property
    def is_dir(self) -> bool:
        return self.type_ == 'tree'


Tree: TypeAlias = dict[Segment, TreeEntry]


class Signature(NamedTuple):
    name: str
    email: str

    def __str__(self):
        return f'{self.name} <{self.email}>'


class Commit(NamedTuple):
    tree: OID
    parent: OID | None
    message: str
    author: Signature
    timestamp: int


class RefValue(NamedTuple):
    symbolic: bool
    value: OID | None
