import pytest
from notecli.conf import JsonRepoConf, NotecliConf


@pytest.fixture
def nb(fs):
    """A Notebook backed by /notes/notes.json on the fake filesystem."""
    fs.create_dir('/notes')
    return NotecliConf(repo_conf=JsonRepoConf(path='/notes/notes.json')).instantiate()
