import pytest

from uwiki.item import Repository


@pytest.fixture
def repo(tmp_path):
    """A fresh repository in a temporary directory."""
    return Repository(tmp_path / 'repo')
