"""A small command-line note manager that keeps short notes, with tags, in a JSON file.

If you installed via ``pip``, run ``notecli -h`` to get help.
Or, run ``python3 -m notecli -h``.

To use the Python API, look at :class:`notecli.api.Notebook`
"""
