import io

import pytest

from uwiki import cli
from uwiki.item import Repository
from uwiki.types import RefValue


@pytest.fixture
def run(tmp_path, capsysbinary, monkeypatch):
    """Run the command line against a repository in tmp_path."""
    repo_dir = str(tmp_path / 'wiki')

    def run(*args, stdin=b''):
        monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(stdin)))
        code = cli.main(['--repo', repo_dir, *args])
        out, err = capsysbinary.readouterr()
        return code, out, err

    run.repo_dir = repo_dir
    return run


def test_init(run):
    code, out, _ = run('init')
    assert code == 0
    assert b'Initialized repository' in out


def test_edit_and_cat(run):
    code, out, _ = run('edit', 'docs/index.md', '-m', 'add docs', stdin=b'# Docs\n')
    assert code == 0
    assert len(out.strip()) == 40

    code, out, _ = run('cat', 'docs/index.md')
    assert out == b'# Docs\n'

    # a directory is shown through its index page
    code, out, _ = run('cat', 'docs')
    assert out == b'# Docs\n'


def test_edit_from_file(run, tmp_path):
    source = tmp_path / 'page.md'
    source.write_bytes(b'from file')
    run('edit', 'page.md', '-m', 'add', '-f', str(source))
    assert Repository(run.repo_dir).item('page.md').content() == b'from file'


def test_unchanged_edit(run):
    run('edit', 'a.md', '-m', 'add', stdin=b'x')
    code, out, _ = run('edit', 'a.md', '-m', 'again', stdin=b'x')
    assert code == 0
    assert b'Nothing to commit' in out


def test_ls(run):
    run('edit', 'a/b.md', '-m', 'add', stdin=b'x')
    run('edit', 'c.md', '-m', 'add', stdin=b'y')
    code, out, _ = run('ls')
    assert out.decode().splitlines() == ['a/', 'c.md']


def test_rm_and_errors(run):
    run('edit', 'a.md', '-m', 'add', stdin=b'x')
    code, _, _ = run('rm', 'a.md', '-m', 'remove')
    assert code == 0

    code, _, err = run('cat', 'a.md')
    assert code == 1
    assert b'does not exist' in err

    code, _, err = run('rm', '', '-m', 'remove root')
    assert code == 1


def test_log_and_changes(run):
    run('edit', 'a.md', '-m', 'first page', stdin=b'x')
    code, out, _ = run('log', '-n', '1')
    text = out.decode()
    assert 'first page' in text
    assert 'Root commit' not in text

    code, out, _ = run('changes')
    assert out.decode().strip() == 'new_file: a.md'


def test_cat_file(run):
    code, out, _ = run('edit', 'a.md', '-m', 'add', stdin=b'raw')
    repo = Repository(run.repo_dir)
    blob = repo.store.get_object(repo.commits.head().tree, 'tree').split(b' ')[2].decode()
    code, out, _ = run('cat-file', blob)
    assert out == b'raw'


def test_corrupt_commit_is_reported(run):
    repo = Repository(run.repo_dir)
    oid = repo.store.hash_object(b'garbage\n\nmsg\n', 'commit')
    repo.store.update_ref('HEAD', RefValue(symbolic=False, value=oid))

    code, _, err = run('log')

    assert code == 1
    assert b'malformed' in err
