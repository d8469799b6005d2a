"""Command-line interface for notecli."""


import argparse
from dataclasses import replace
from datetime import timezone
import json
import logging
import sys
from typing import List
from terminaltables import AsciiTable
from notecli.api import Notebook, NoteNotFoundError, InvalidInputError
from notecli.conf import NotecliConf
from notecli.models import Note, NoteSortField
from notecli.repos.base import StoreError


def _sort_field(args) -> NoteSortField:
    return NoteSortField(args.sort) if args.sort else None


def _print_notes(notes: List[Note], nb: Notebook) -> None:
    fmt = nb.conf.date_format
    data = [('ID', 'Content', 'Tags', 'Created at', 'Updated at')]
    for note in notes:
        data.append((str(note.id),
                     note.content,
                     ', '.join(note.tags) if note.tags else '-',
                     note.created_at.astimezone(timezone.utc).strftime(fmt),
                     note.updated_at.astimezone(timezone.utc).strftime(fmt)))
    table = AsciiTable(data)
    table.justify_columns[0] = 'right'
    print(table.table)


def _add(args, nb: Notebook) -> int:
    note = nb.add(args.content[0], args.tags or [])
    if not args.preview:
        print(f'Added note {note.id}')
    return 0


def _list(args, nb: Notebook) -> int:
    notes = nb.list(_sort_field(args), reverse=args.reverse)
    if args.json:
        print(json.dumps([n.as_json() for n in notes]))
    elif not notes:
        print('No notes saved.')
    else:
        _print_notes(notes, nb)
    return 0


def _remove(args, nb: Notebook) -> int:
    try:
        nb.remove(args.id[0])
    except NoteNotFoundError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    if not args.preview:
        print(f'Removed note {args.id[0]}')
    return 0


def _add_tag(args, nb: Notebook) -> int:
    try:
        note = nb.add_tags(args.id[0], args.tags or [])
    except (InvalidInputError, NoteNotFoundError) as e:
        print(e)
        return 0
    if not args.preview:
        print(f'Tags for note {note.id}: {", ".join(note.tags)}')
    return 0


def _edit(args, nb: Notebook) -> int:
    try:
        note = nb.edit(args.id[0], args.content[0])
    except (InvalidInputError, NoteNotFoundError) as e:
        print(e)
        return 0
    if not args.preview:
        print(f'Updated note {note.id}')
    return 0


def _search(args, nb: Notebook) -> int:
    try:
        notes = nb.search(args.keyword[0], _sort_field(args), reverse=args.reverse)
    except InvalidInputError as e:
        print(e)
        return 0
    if args.json:
        print(json.dumps([n.as_json() for n in notes]))
    else:
        _print_notes(notes, nb)
    return 0


def argparser() -> argparse.ArgumentParser:
    sort_choices = [f.value for f in NoteSortField]
    sort_help = 'How to order the notes. Defaults to the default_sort in your config, which is "id" unless changed.'

    parser = argparse.ArgumentParser(prog='notecli', description='Minimal personal note manager.')
    parser.set_defaults(func=None, preview=False)
    parser.add_argument('--file', help='Path of the notes file. Defaults to notes.json in the current directory, '
                                       'unless your ~/.notecli.conf.py says otherwise.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log details of what is loaded and saved.')

    subs = parser.add_subparsers(title='Commands')

    p_add = subs.add_parser('add', help='Add a new note. The id of the new note is printed.')
    p_add.add_argument('content', nargs=1, help='Text of the note.')
    p_add.add_argument('--tag', dest='tags', action='append', help='Tag for the note. May be repeated.')
    p_add.add_argument('-p', '--preview', action='store_true', help='Print the resulting notes file but do not save it')
    p_add.set_defaults(func=_add)

    p_list = subs.add_parser('list', help='Show all notes as a table.')
    p_list.add_argument('--sort', choices=sort_choices, help=sort_help)
    p_list.add_argument('-r', '--reverse', action='store_true', help='Sort descending.')
    p_list.add_argument('-j', '--json', action='store_true', help='Output as a JSON array of notes.')
    p_list.set_defaults(func=_list)

    p_remove = subs.add_parser('remove', help='Delete a note. Its id will be given to the next note you add.')
    p_remove.add_argument('id', nargs=1, type=int)
    p_remove.add_argument('-p', '--preview', action='store_true',
                          help='Print the resulting notes file but do not save it')
    p_remove.set_defaults(func=_remove)

    p_tag = subs.add_parser('add-tag', help='Add tags to an existing note. Tags it already has are skipped.')
    p_tag.add_argument('id', nargs=1, type=int)
    p_tag.add_argument('--tag', dest='tags', action='append', help='Tag to add. May be repeated.')
    p_tag.add_argument('-p', '--preview', action='store_true', help='Print the resulting notes file but do not save it')
    p_tag.set_defaults(func=_add_tag)

    p_edit = subs.add_parser('edit', help='Replace the content of an existing note.')
    p_edit.add_argument('id', nargs=1, type=int)
    p_edit.add_argument('--content', nargs=1, required=True, help='New text of the note.')
    p_edit.add_argument('-p', '--preview', action='store_true',
                        help='Print the resulting notes file but do not save it')
    p_edit.set_defaults(func=_edit)

    p_search = subs.add_parser('search', help='Show notes containing a keyword (ignoring case) as a table.')
    p_search.add_argument('keyword', nargs=1)
    p_search.add_argument('--sort', choices=sort_choices, help=sort_help)
    p_search.add_argument('-r', '--reverse', action='store_true', help='Sort descending.')
    p_search.add_argument('-j', '--json', action='store_true', help='Output as a JSON array of notes.')
    p_search.set_defaults(func=_search)

    return parser


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    if not args.func:
        parser.print_help()
        return 1
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    try:
        conf = NotecliConf.for_user()
        repo_conf = conf.repo_conf
        if args.file:
            repo_conf = replace(repo_conf, path=args.file)
        if args.preview:
            repo_conf = replace(repo_conf, preview_mode=True)
        conf = replace(conf, repo_conf=repo_conf)
        with conf.instantiate() as nb:
            return args.func(args, nb)
    except StoreError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
