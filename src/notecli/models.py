"""Defines classes for representing notes, the stored collection, and queries.

The most important classes are :class:`Note`, :class:`NoteCollection`, and :class:`NoteQuery`
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Union


def utcnow() -> datetime:
    """Returns the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _parse_timestamp(val) -> datetime:
    if not isinstance(val, str):
        raise ValueError(f'Expected an ISO-8601 timestamp string, got: {val!r}')
    parsed = datetime.fromisoformat(val)
    if not parsed.tzinfo:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require(data: dict, key: str, kind: type):
    if key not in data:
        raise ValueError(f'Missing field: {key}')
    val = data[key]
    # bool is a subclass of int, but true/false is never a valid id
    if not isinstance(val, kind) or (kind is int and isinstance(val, bool)):
        raise ValueError(f'Field {key} should be of type {kind.__name__}, got: {val!r}')
    return val


@dataclass
class Note:
    """A single note, as stored in the notes file."""

    id: int
    """Identifier of the note. Unique among live notes, and never changed once assigned."""

    content: str
    """The text of the note."""

    tags: List[str] = field(default_factory=list)
    """Tags for the note, in the order they were added.

    Tags given when the note is created are kept verbatim, including duplicates; tags added afterward
    via :meth:`notecli.api.Notebook.add_tags` are only appended if not already present.
    """

    created_at: datetime = field(default_factory=utcnow)
    """When the note was created (UTC)."""

    updated_at: datetime = None
    """When the content of the note was last changed (UTC). Defaults to :attr:`created_at`."""

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'content': self.content,
            'tags': list(self.tags),
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat()
        }

    @classmethod
    def from_json(cls, data) -> Note:
        """Creates an instance from a dict in the format produced by :meth:`as_json`.

        Raises :exc:`ValueError` if the data does not have that format.
        """
        if not isinstance(data, dict):
            raise ValueError(f'Expected a note object, got: {data!r}')
        tags = _require(data, 'tags', list)
        if not all(isinstance(t, str) for t in tags):
            raise ValueError(f'Tags should be strings, got: {tags!r}')
        note_id = _require(data, 'id', int)
        if note_id < 1:
            raise ValueError(f'Note id should be a positive integer, got: {note_id}')
        return cls(id=note_id,
                   content=_require(data, 'content', str),
                   tags=list(tags),
                   created_at=_parse_timestamp(_require(data, 'created_at', str)),
                   updated_at=_parse_timestamp(_require(data, 'updated_at', str)))


@dataclass
class NoteCollection:
    """Everything stored in a notes file: the notes themselves plus the ids available for reuse."""

    notes: List[Note] = field(default_factory=list)
    """Notes in storage order, which is not necessarily id order."""

    free_ids: List[int] = field(default_factory=list)
    """Ids of deleted notes, in the order they were freed. The first one is reused first."""

    def find(self, note_id: int) -> Optional[Note]:
        """Returns the live note with the given id, or None."""
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def ids(self) -> List[int]:
        return [note.id for note in self.notes]

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'notes': [note.as_json() for note in self.notes],
            'free_ids': list(self.free_ids)
        }

    @classmethod
    def from_json(cls, data) -> NoteCollection:
        """Creates an instance from a dict in the format produced by :meth:`as_json`.

        Raises :exc:`ValueError` if the data does not have that format.
        """
        if not isinstance(data, dict):
            raise ValueError(f'Expected an object with "notes" and "free_ids", got: {type(data).__name__}')
        notes = [Note.from_json(n) for n in _require(data, 'notes', list)]
        free_ids = _require(data, 'free_ids', list)
        for free_id in free_ids:
            if not isinstance(free_id, int) or isinstance(free_id, bool) or free_id < 1:
                raise ValueError(f'Free ids should be positive integers, got: {free_id!r}')
        ids = [note.id for note in notes]
        if len(set(ids)) != len(ids):
            raise ValueError(f'Two notes share an id: {sorted(i for i in set(ids) if ids.count(i) > 1)}')
        if len(set(free_ids)) != len(free_ids):
            raise ValueError(f'Free ids are repeated: {free_ids!r}')
        live_and_free = set(ids) & set(free_ids)
        if live_and_free:
            raise ValueError(f'Ids are both in use and free: {sorted(live_and_free)}')
        return cls(notes=notes, free_ids=list(free_ids))


class NoteSortField(Enum):
    ID = 'id'
    DATE = 'date'
    UPDATE = 'update'
    CONTENT = 'content'

    def key(self, note: Note) -> Union[int, datetime, str]:
        """Returns the sort key for the given note.

        Content is compared case-sensitively, by raw string ordering.
        """
        if self == NoteSortField.ID:
            return note.id
        elif self == NoteSortField.DATE:
            return note.created_at
        elif self == NoteSortField.UPDATE:
            return note.updated_at
        elif self == NoteSortField.CONTENT:
            return note.content


@dataclass
class NoteQuery:
    """Represents criteria for listing or searching notes.

    If :attr:`keyword` is empty the query matches every note.
    """

    keyword: str = ''
    """Substring that must occur in the note content, compared case-insensitively."""

    sort_by: NoteSortField = NoteSortField.ID
    """Indicates how to sort the results. Notes with equal keys keep their storage order."""

    reverse: bool = False
    """If True, sort descending."""

    def apply_filtering(self, notes: Iterable[Note]) -> Iterator[Note]:
        """Yields the entries from the given iterable which match the keyword of this query."""
        needle = self.keyword.lower()
        for note in notes:
            if needle and needle not in note.content.lower():
                continue
            yield note

    def apply_sorting(self, notes: Iterable[Note]) -> List[Note]:
        """Returns a copy of the given notes sorted using this query's sort_by."""
        result = list(notes)
        result.sort(key=self.sort_by.key, reverse=self.reverse)
        return result

    def apply(self, notes: Iterable[Note]) -> List[Note]:
        return self.apply_sorting(self.apply_filtering(notes))
