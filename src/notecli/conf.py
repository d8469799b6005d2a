"""Configuration objects for notecli.

Settings can be customized by creating ``~/.notecli.conf.py`` and assigning an instance of :class:`NotecliConf` to
the variable ``conf`` in it. For example:

.. code-block:: python

   from notecli.conf import *
   conf = NotecliConf(
       repo_conf=JsonRepoConf(path='~/Documents/notes.json'),
       default_sort=NoteSortField.DATE
   )

If the file does not exist, the defaults are used.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
import os.path
from notecli.models import NoteSortField


DEFAULT_STORE_PATH = 'notes.json'

DEFAULT_DATE_FORMAT = '%d/%m/%Y - %H:%M'


@dataclass
class RepoConf:
    """Base class for repo config. Use a subclass such as :class:`JsonRepoConf`."""

    path: str = DEFAULT_STORE_PATH
    """Location of the file holding your notes.

    Relative paths are resolved against the current working directory, and ``~`` is expanded.
    The ``--file`` command-line argument overrides this.
    """

    preview_mode: bool = False
    """If True, commands that would change notes should instead just print what would be saved.

    Instead of setting this in your ``.notecli.conf.py``, you can pass a ``--preview`` command-line argument to
    relevant commands.
    """

    def instantiate(self):
        raise NotImplementedError("Please use a subclass like JsonRepoConf instead!")

    def standardize(self):
        return replace(
            self,
            path=os.path.abspath(os.path.expanduser(self.path))
        )


@dataclass
class JsonRepoConf(RepoConf):
    """Configures notecli to keep notes in a JSON file, via :class:`notecli.repos.jsonfile.JsonRepo`."""

    indent: int = 2
    """Indentation used when writing the JSON document. Use None for the most compact output."""

    def instantiate(self):
        from notecli.repos.jsonfile import JsonRepo
        return JsonRepo(self.standardize())


@dataclass
class NotecliConf:
    repo_conf: RepoConf = field(default_factory=JsonRepoConf)
    """Configures where and how your notes are stored."""

    default_sort: NoteSortField = NoteSortField.ID
    """How the ``list`` and ``search`` commands order notes when ``--sort`` is not given."""

    date_format: str = DEFAULT_DATE_FORMAT
    """``strftime`` format used for the timestamp columns of the ``list`` and ``search`` tables."""

    @classmethod
    def user_config_path(cls) -> str:
        return os.path.expanduser(os.path.join('~', '.notecli.conf.py'))

    @classmethod
    def for_user(cls) -> NotecliConf:
        """Loads the ``conf`` variable from ``~/.notecli.conf.py``, or returns a default instance if there is no file.

        Raises :exc:`Exception` if the file exists but does not assign a :class:`NotecliConf` to ``conf``.
        """
        path = cls.user_config_path()
        if not os.path.exists(path):
            return cls()
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise Exception('You need to assign an instance of NotecliConf to the variable `conf` '
                            f'in your config file: {path}')
        return context['conf']

    def standardize(self):
        return replace(
            self,
            repo_conf=self.repo_conf.standardize()
        )

    def instantiate(self):
        from notecli.api import Notebook
        return Notebook(self.standardize())
