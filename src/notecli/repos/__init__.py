"""Handles reading and writing the stored collection of notes.

:class:`notecli.repos.base.Repo` defines an API.
:class:`notecli.repos.jsonfile.JsonRepo` is the implementation that keeps everything in a single JSON file.
"""
