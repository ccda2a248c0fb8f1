from uwiki import diff


def test_compare_trees_aligns_paths():
    t1 = {b'a': '1', b'b': '2'}
    t2 = {b'b': '3', b'c': '4'}
    assert list(diff.compare_trees(t1, t2)) == [
        (b'a', ['1', None]),
        (b'b', ['2', '3']),
        (b'c', [None, '4']),
    ]


def test_iter_changed_files():
    t_from = {b'same': '1', b'gone': '2', b'edited': '3'}
    t_to = {b'same': '1', b'edited': '4', b'added': '5'}
    assert dict(diff.iter_changed_files(t_from, t_to)) == {
        b'gone': 'deleted',
        b'edited': 'modified',
        b'added': 'new_file',
    }


def test_flatten_tree(repo):
    repo.item('a/b/c.md').edit(b'x', 'add')
    repo.item('d.md').edit(b'y', 'add')
    tree = repo.commits.head().tree

    flat = diff.flatten_tree(repo.store, tree)

    assert sorted(flat) == [b'a/b/c.md', b'd.md']
    assert repo.store.get_object(flat[b'd.md']) == b'y'
