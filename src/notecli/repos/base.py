"""Defines the API for loading and saving a user's collection of notes.

The most important class is :class:`Repo`.
"""

from notecli.models import NoteCollection


class StoreError(Exception):
    """Base class for errors raised by a :class:`Repo` when it cannot read or write its backing store."""
    def __init__(self, message: str, path: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause

    def __str__(self):
        if self.cause:
            return f'{self.message}: {self.path} ({self.cause})'
        return f'{self.message}: {self.path}'


class MalformedStoreError(StoreError):
    """Raised when the backing store exists and is not blank, but cannot be parsed as a collection of notes."""


class StoreIOError(StoreError):
    """Raised when the backing store cannot be read or written because of an OS-level error."""


class Repo:
    """Base class for repos, which are responsible for persisting the whole :class:`NoteCollection`.

    Repos are not incremental: every read loads the entire collection, and every write replaces it.
    """
    def load(self) -> NoteCollection:
        """Reads the full collection.

        A missing or blank backing store is treated as an empty collection, not as an error.
        May raise :exc:`MalformedStoreError` or :exc:`StoreIOError`.
        """
        raise NotImplementedError()

    def save(self, collection: NoteCollection) -> None:
        """Overwrites the backing store with the given collection.

        May raise :exc:`StoreIOError`. If it does, the previously stored collection is left in place.
        """
        raise NotImplementedError()

    def clear(self) -> None:
        """Resets the backing store to an empty collection."""
        self.save(NoteCollection())

    def close(self) -> None:
        """Release any resources associated with the repo. Should be called when you're done with an instance."""
        pass
