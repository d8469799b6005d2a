import json
import logging
import os
from pathlib import Path
from freezegun import freeze_time
from notecli import cli
from notecli.repos.base import StoreIOError


def nc_setup(fs):
    fs.create_dir('/notes/cwd')
    os.chdir('/notes/cwd')


def stored(path='/notes/cwd/notes.json') -> dict:
    return json.loads(Path(path).read_text())


def test_no_command(fs, capsys):
    nc_setup(fs)
    assert cli.main([]) == 1
    out, err = capsys.readouterr()
    assert 'usage:' in out
    assert not Path('notes.json').exists()


@freeze_time('2012-05-02T03:04:05Z')
def test_add_and_list(fs, capsys):
    nc_setup(fs)
    assert cli.main(['add', 'buy milk']) == 0
    out, err = capsys.readouterr()
    assert out == 'Added note 1\n'
    assert cli.main(['add', 'call mom', '--tag', 'family', '--tag', 'phone']) == 0
    out, err = capsys.readouterr()
    assert out == 'Added note 2\n'
    assert cli.main(['list']) == 0
    out, err = capsys.readouterr()
    assert out == """+----+----------+---------------+--------------------+--------------------+
| ID | Content  | Tags          | Created at         | Updated at         |
+----+----------+---------------+--------------------+--------------------+
|  1 | buy milk | -             | 02/05/2012 - 03:04 | 02/05/2012 - 03:04 |
|  2 | call mom | family, phone | 02/05/2012 - 03:04 | 02/05/2012 - 03:04 |
+----+----------+---------------+--------------------+--------------------+
"""


def test_list_empty(fs, capsys):
    nc_setup(fs)
    assert cli.main(['list']) == 0
    out, err = capsys.readouterr()
    assert out == 'No notes saved.\n'
    assert not Path('notes.json').exists()


def test_list_sort_and_json(fs, capsys):
    nc_setup(fs)
    with freeze_time('2012-05-02T00:00:00Z'):
        cli.main(['add', 'banana'])
    with freeze_time('2012-05-01T00:00:00Z'):
        cli.main(['add', 'apple'])
    capsys.readouterr()

    def listed(*extra):
        assert cli.main(['list', '-j', *extra]) == 0
        out, err = capsys.readouterr()
        return [n['id'] for n in json.loads(out)]

    assert listed() == [1, 2]
    assert listed('--sort', 'date') == [2, 1]
    assert listed('--sort', 'content') == [2, 1]
    assert listed('--sort', 'update', '-r') == [1, 2]
    assert listed('--reverse') == [2, 1]

    assert cli.main(['list', '--json']) == 0
    out, err = capsys.readouterr()
    assert json.loads(out)[0] == {'id': 1, 'content': 'banana', 'tags': [],
                                  'created_at': '2012-05-02T00:00:00+00:00',
                                  'updated_at': '2012-05-02T00:00:00+00:00'}


def test_remove(fs, capsys):
    nc_setup(fs)
    cli.main(['add', 'content0'])
    cli.main(['add', 'content1'])
    capsys.readouterr()
    assert cli.main(['remove', '2']) == 0
    out, err = capsys.readouterr()
    assert out == 'Removed note 2\n'
    data = stored()
    assert [n['id'] for n in data['notes']] == [1]
    assert data['free_ids'] == [2]


def test_remove_missing(fs, capsys):
    nc_setup(fs)
    cli.main(['add', 'content0'])
    capsys.readouterr()
    before = Path('notes.json').read_text()
    assert cli.main(['remove', '5']) == 1
    out, err = capsys.readouterr()
    assert out == ''
    assert err == 'Error: Note 5 not found\n'
    assert Path('notes.json').read_text() == before


def test_id_reuse(fs, capsys):
    nc_setup(fs)
    cli.main(['add', 'content1'])
    cli.main(['add', 'content2'])
    cli.main(['remove', '1'])
    cli.main(['remove', '2'])
    assert stored()['free_ids'] == [1, 2]
    capsys.readouterr()
    assert cli.main(['add', 'new1']) == 0
    assert cli.main(['add', 'new2']) == 0
    out, err = capsys.readouterr()
    assert out == 'Added note 1\nAdded note 2\n'
    data = stored()
    assert data['free_ids'] == []
    assert [n['id'] for n in data['notes']] == [1, 2]


def test_add_tag(fs, capsys):
    nc_setup(fs)
    cli.main(['add', 'note'])
    capsys.readouterr()
    assert cli.main(['add-tag', '1', '--tag', 'rust', '--tag', 'cli']) == 0
    out, err = capsys.readouterr()
    assert out == 'Tags for note 1: rust, cli\n'
    assert cli.main(['add-tag', '1', '--tag', 'rust']) == 0
    out, err = capsys.readouterr()
    assert out == 'Tags for note 1: rust, cli\n'
    assert stored()['notes'][0]['tags'] == ['rust', 'cli']


def test_add_tag_soft_failures(fs, capsys):
    nc_setup(fs)
    cli.main(['add', 'note'])
    capsys.readouterr()
    before = Path('notes.json').read_text()
    assert cli.main(['add-tag', '1']) == 0
    out, err = capsys.readouterr()
    assert out == 'No tags given.\n'
    assert cli.main(['add-tag', '3', '--tag', 'x']) == 0
    out, err = capsys.readouterr()
    assert out == 'Note 3 not found\n'
    assert err == ''
    assert Path('notes.json').read_text() == before


def test_edit(fs, capsys):
    nc_setup(fs)
    with freeze_time('2012-05-02T03:04:05Z'):
        cli.main(['add', 'old content'])
    with freeze_time('2012-05-03T10:20:00Z'):
        assert cli.main(['edit', '1', '--content', 'new content']) == 0
    out, err = capsys.readouterr()
    assert out == 'Added note 1\nUpdated note 1\n'
    note = stored()['notes'][0]
    assert note['content'] == 'new content'
    assert note['created_at'] == '2012-05-02T03:04:05+00:00'
    assert note['updated_at'] == '2012-05-03T10:20:00+00:00'


def test_edit_soft_failures(fs, capsys):
    nc_setup(fs)
    cli.main(['add', 'note'])
    capsys.readouterr()
    before = Path('notes.json').read_text()
    assert cli.main(['edit', '99', '--content', 'x']) == 0
    out, err = capsys.readouterr()
    assert out == 'Note 99 not found\n'
    assert cli.main(['edit', '1', '--content', '']) == 0
    out, err = capsys.readouterr()
    assert out == 'No content given.\n'
    assert Path('notes.json').read_text() == before


@freeze_time('2012-05-02T03:04:05Z')
def test_search(fs, capsys):
    nc_setup(fs)
    cli.main(['add', 'Hello World'])
    cli.main(['add', 'goodbye'])
    capsys.readouterr()
    assert cli.main(['search', 'hello']) == 0
    out, err = capsys.readouterr()
    assert out == """+----+-------------+------+--------------------+--------------------+
| ID | Content     | Tags | Created at         | Updated at         |
+----+-------------+------+--------------------+--------------------+
|  1 | Hello World | -    | 02/05/2012 - 03:04 | 02/05/2012 - 03:04 |
+----+-------------+------+--------------------+--------------------+
"""
    assert cli.main(['search', 'WORLD', '-j']) == 0
    out, err = capsys.readouterr()
    assert [n['content'] for n in json.loads(out)] == ['Hello World']


def test_search_no_results(fs, capsys):
    nc_setup(fs)
    assert cli.main(['search', 'milk']) == 0
    out, err = capsys.readouterr()
    assert out == """+----+---------+------+------------+------------+
| ID | Content | Tags | Created at | Updated at |
+----+---------+------+------------+------------+
"""


def test_search_empty_keyword(fs, capsys):
    nc_setup(fs)
    assert cli.main(['search', '']) == 0
    out, err = capsys.readouterr()
    assert out == 'No keyword given.\n'


def test_file_option(fs, capsys):
    nc_setup(fs)
    fs.create_dir('/elsewhere')
    assert cli.main(['--file', '/elsewhere/mine.json', 'add', 'hi']) == 0
    assert not Path('notes.json').exists()
    assert stored('/elsewhere/mine.json')['notes'][0]['content'] == 'hi'
    assert cli.main(['--file', '../other.json', 'add', 'there']) == 0
    assert stored('/notes/other.json')['notes'][0]['content'] == 'there'


def test_user_config(fs, capsys):
    nc_setup(fs)
    fs.create_file(os.path.expanduser('~/.notecli.conf.py'), contents="""from notecli.conf import *
conf = NotecliConf(repo_conf=JsonRepoConf(path='/notes/configured.json'), date_format='%Y-%m-%d')""")
    with freeze_time('2012-05-02T03:04:05Z'):
        assert cli.main(['add', 'configured']) == 0
    assert stored('/notes/configured.json')['notes'][0]['content'] == 'configured'
    capsys.readouterr()
    assert cli.main(['list']) == 0
    out, err = capsys.readouterr()
    assert '| 2012-05-02 | 2012-05-02 |' in out
    assert cli.main(['--file', 'override.json', 'add', 'x']) == 0
    assert Path('/notes/cwd/override.json').exists()


def test_preview(fs, capsys):
    nc_setup(fs)
    cli.main(['add', 'keep'])
    capsys.readouterr()
    before = Path('notes.json').read_text()
    with freeze_time('2012-05-02T03:04:05Z'):
        assert cli.main(['add', '-p', 'draft', '--tag', 't']) == 0
    out, err = capsys.readouterr()
    previewed = json.loads(out)
    assert previewed['notes'][1] == {'id': 2, 'content': 'draft', 'tags': ['t'],
                                     'created_at': '2012-05-02T03:04:05+00:00',
                                     'updated_at': '2012-05-02T03:04:05+00:00'}
    assert cli.main(['remove', '-p', '1']) == 0
    out, err = capsys.readouterr()
    assert json.loads(out) == {'notes': [], 'free_ids': [1]}
    assert cli.main(['edit', '--preview', '1', '--content', 'changed']) == 0
    assert cli.main(['add-tag', '-p', '1', '--tag', 'x']) == 0
    assert Path('notes.json').read_text() == before


def test_malformed_store(fs, capsys):
    nc_setup(fs)
    fs.create_file('/notes/cwd/notes.json', contents='{not json')
    assert cli.main(['list']) == 1
    out, err = capsys.readouterr()
    assert out == ''
    assert err.startswith('Error: Unable to parse notes file: /notes/cwd/notes.json (')
    assert cli.main(['add', 'x']) == 1
    assert Path('notes.json').read_text() == '{not json'


def test_blank_store(fs, capsys):
    nc_setup(fs)
    fs.create_file('/notes/cwd/notes.json', contents='\n')
    assert cli.main(['add', 'first']) == 0
    assert stored()['notes'][0]['id'] == 1


def test_save_failure(fs, capsys, mocker):
    nc_setup(fs)
    mocker.patch('notecli.repos.jsonfile.JsonRepo.save',
                 side_effect=StoreIOError('Unable to write notes file', '/notes/cwd/notes.json',
                                          PermissionError('denied')))
    assert cli.main(['add', 'x']) == 1
    out, err = capsys.readouterr()
    assert out == ''
    assert err == 'Error: Unable to write notes file: /notes/cwd/notes.json (denied)\n'


def test_verbose_logging(fs, capsys, caplog):
    nc_setup(fs)
    caplog.set_level(logging.DEBUG)
    assert cli.main(['-v', 'add', 'x']) == 0
    assert 'Added note 1' in caplog.text
    assert 'Saved 1 notes and 0 free ids to /notes/cwd/notes.json' in caplog.text


def test_inconsistent_store_is_rejected(fs, capsys):
    nc_setup(fs)
    contents = json.dumps({
        'notes': [{'id': 1, 'content': 'a', 'tags': [],
                   'created_at': '2020-01-01T00:00:00+00:00', 'updated_at': '2020-01-01T00:00:00+00:00'}],
        'free_ids': [1, 1]
    })
    fs.create_file('/notes/cwd/notes.json', contents=contents)
    assert cli.main(['add', 'b']) == 1
    out, err = capsys.readouterr()
    assert out == ''
    assert err.startswith('Error: Unable to parse notes file: /notes/cwd/notes.json (')
    assert Path('notes.json').read_text() == contents


def test_list_shows_utc(fs, capsys):
    nc_setup(fs)
    fs.create_file('/notes/cwd/notes.json', contents=json.dumps({
        'notes': [{'id': 1, 'content': 'abroad', 'tags': [],
                   'created_at': '2020-01-01T05:00:00+02:00', 'updated_at': '2020-01-01T01:30:00-04:00'}],
        'free_ids': []
    }))
    assert cli.main(['list']) == 0
    out, err = capsys.readouterr()
    assert '|  1 | abroad  | -    | 01/01/2020 - 03:00 | 01/01/2020 - 05:30 |' in out
