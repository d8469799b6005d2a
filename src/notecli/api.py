"""Provides the main entry point for using the library, :class:`Notebook`"""

from __future__ import annotations
import logging
from typing import Iterable, List
from notecli.conf import NotecliConf
from notecli.models import Note, NoteCollection, NoteQuery, NoteSortField, utcnow


logger = logging.getLogger(__name__)


class Error(Exception):
    pass


class NoteNotFoundError(Error):
    """Raised when an operation refers to a note id that is not in the collection."""
    def __init__(self, note_id: int):
        super().__init__(f'Note {note_id} not found')
        self.note_id = note_id


class InvalidInputError(Error):
    """Raised when an operation is given nothing to work with, such as an empty search keyword.

    The command-line interface reports these as messages rather than failures.
    """


def allocate_id(collection: NoteCollection) -> int:
    """Removes and returns the id the next new note should get.

    Freed ids are reused first, in the order they were freed. Otherwise the id is one more than the
    highest live id, or 1 for an empty collection.
    """
    if collection.free_ids:
        return collection.free_ids.pop(0)
    return max(collection.ids(), default=0) + 1


class Notebook:
    """Main entry point for working programmatically with your notes.

    Generally, you should get an instance using the :meth:`Notebook.for_user` method. Call :meth:`close` when you're
    done with it, or else use it as a context manager.

    Every method loads the whole collection from the repo, and methods that change anything save the whole
    collection back before returning. Nothing is cached between calls.

    .. attribute:: conf
       :type: notecli.conf.NotecliConf

    .. attribute:: repo
       :type: notecli.repos.base.Repo

    Here's an example that tags every note mentioning groceries:

    .. code-block:: python

       from notecli.api import Notebook
       with Notebook.for_user() as nb:
           for note in nb.search('groceries'):
               nb.add_tags(note.id, ['shopping'])
    """

    @staticmethod
    def for_user() -> Notebook:
        """Creates an instance using the user's ``~/.notecli.conf.py`` file, or the defaults if there isn't one."""
        return NotecliConf.for_user().instantiate()

    def __init__(self, conf: NotecliConf):
        self.conf = conf
        self.repo = conf.repo_conf.instantiate()

    def get(self, note_id: int) -> Note:
        """Returns the note with the given id.

        Raises :exc:`NoteNotFoundError` if there is none.
        """
        note = self.repo.load().find(note_id)
        if not note:
            raise NoteNotFoundError(note_id)
        return note

    def add(self, content: str, tags: Iterable[str] = ()) -> Note:
        """Creates and saves a new note, returning it.

        Tags are stored exactly as given, duplicates included.
        """
        collection = self.repo.load()
        note_id = allocate_id(collection)
        now = utcnow()
        note = Note(id=note_id, content=content, tags=list(tags), created_at=now, updated_at=now)
        collection.notes.append(note)
        self.repo.save(collection)
        logger.info('Added note %d', note.id)
        return note

    def remove(self, note_id: int) -> Note:
        """Deletes a note and makes its id available for reuse. Returns the deleted note.

        Raises :exc:`NoteNotFoundError` if there is no note with that id.
        """
        collection = self.repo.load()
        index = next((i for i, n in enumerate(collection.notes) if n.id == note_id), None)
        if index is None:
            raise NoteNotFoundError(note_id)
        note = collection.notes.pop(index)
        collection.free_ids.append(note_id)
        self.repo.save(collection)
        logger.info('Removed note %d', note_id)
        return note

    def edit(self, note_id: int, content: str) -> Note:
        """Replaces the content of a note and updates its ``updated_at`` timestamp.

        Raises :exc:`InvalidInputError` if content is empty, or :exc:`NoteNotFoundError` if there is no
        note with that id. Nothing is saved in either case.
        """
        if not content:
            raise InvalidInputError('No content given.')
        collection = self.repo.load()
        note = collection.find(note_id)
        if not note:
            raise NoteNotFoundError(note_id)
        note.content = content
        note.updated_at = max(utcnow(), note.created_at)
        self.repo.save(collection)
        return note

    def add_tags(self, note_id: int, tags: Iterable[str]) -> Note:
        """Adds each of the given tags to a note, unless the note already has it.

        New tags are appended in the order given. Raises :exc:`InvalidInputError` if no tags are given, or
        :exc:`NoteNotFoundError` if there is no note with that id.
        """
        tags = list(tags)
        if not tags:
            raise InvalidInputError('No tags given.')
        collection = self.repo.load()
        note = collection.find(note_id)
        if not note:
            raise NoteNotFoundError(note_id)
        for tag in tags:
            if tag not in note.tags:
                note.tags.append(tag)
        self.repo.save(collection)
        return note

    def query(self, query: NoteQuery = None) -> List[Note]:
        """Returns the notes matching the query, sorted as it specifies."""
        if query is None:
            query = NoteQuery(sort_by=self.conf.default_sort)
        return query.apply(self.repo.load().notes)

    def list(self, sort_by: NoteSortField = None, reverse: bool = False) -> List[Note]:
        """Returns all notes, sorted by the given field (or :attr:`NotecliConf.default_sort`)."""
        return self.query(NoteQuery(sort_by=sort_by or self.conf.default_sort, reverse=reverse))

    def search(self, keyword: str, sort_by: NoteSortField = None, reverse: bool = False) -> List[Note]:
        """Returns notes whose content contains the keyword, ignoring case.

        Raises :exc:`InvalidInputError` if the keyword is empty.
        """
        if not keyword:
            raise InvalidInputError('No keyword given.')
        return self.query(NoteQuery(keyword=keyword, sort_by=sort_by or self.conf.default_sort, reverse=reverse))

    def clear(self) -> None:
        """Deletes every note and forgets all freed ids."""
        self.repo.clear()

    def close(self):
        """Closes the associated repo and releases any other resources."""
        self.repo.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.repo.close()
