"""Provides the :class:`JsonRepo` class."""

import json
import logging
import os
import os.path
import tempfile

from notecli.conf import JsonRepoConf
from notecli.models import NoteCollection
from notecli.repos.base import Repo, MalformedStoreError, StoreIOError


logger = logging.getLogger(__name__)


class JsonRepo(Repo):
    """Stores the collection of notes as a single JSON document.

    The document is an object with two keys: ``notes``, a list of note records as produced by
    :meth:`notecli.models.Note.as_json`, and ``free_ids``, a list of integers.

    Saving writes the whole document to a temporary file next to the target and then renames it into place,
    so the file on disk is always either the old collection or the new one.

    .. attribute:: conf
       :type: JsonRepoConf
    """
    def __init__(self, conf: JsonRepoConf):
        self.conf = conf
        if not conf.path:
            raise ValueError('`path` must be set in JsonRepoConf.')

    @property
    def path(self) -> str:
        return self.conf.path

    def load(self) -> NoteCollection:
        try:
            with open(self.path, 'r', encoding='utf-8') as file:
                text = file.read()
        except FileNotFoundError:
            logger.debug('No notes file at %s, starting with an empty collection', self.path)
            return NoteCollection()
        except UnicodeDecodeError as e:
            raise MalformedStoreError('Notes file is not valid UTF-8', self.path, e)
        except OSError as e:
            raise StoreIOError('Unable to read notes file', self.path, e)

        if not text.strip():
            logger.debug('Notes file %s is blank, starting with an empty collection', self.path)
            return NoteCollection()

        try:
            collection = NoteCollection.from_json(json.loads(text))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            raise MalformedStoreError('Unable to parse notes file', self.path, e)
        logger.debug('Loaded %d notes and %d free ids from %s',
                     len(collection.notes), len(collection.free_ids), self.path)
        return collection

    def serialize(self, collection: NoteCollection) -> str:
        """Returns the JSON text that :meth:`save` would write for the given collection."""
        return json.dumps(collection.as_json(), indent=self.conf.indent, ensure_ascii=False)

    def save(self, collection: NoteCollection) -> None:
        text = self.serialize(collection)
        if self.conf.preview_mode:
            print(text)
            return

        dirname = os.path.dirname(self.path) or '.'
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix='.notecli-', suffix='.tmp', dir=dirname)
            with os.fdopen(fd, 'w', encoding='utf-8') as file:
                file.write(text)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreIOError('Unable to write notes file', self.path, e)
        logger.debug('Saved %d notes and %d free ids to %s',
                     len(collection.notes), len(collection.free_ids), self.path)
