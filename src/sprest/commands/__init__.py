"""Built-in CLI sub-commands for sprest.

* :mod:`~sprest.commands.query` -- ``query`` (GET any REST path) and
  ``settings`` (print list-backed configuration).
* :mod:`~sprest.commands.profile` -- create, list, show, and delete
  connection profiles.
* :mod:`~sprest.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``profile`` and ``config``) or plain callback
functions registered directly on the root app.
"""
