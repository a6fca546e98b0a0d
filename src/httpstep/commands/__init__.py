"""Built-in CLI sub-command groups for httpstep.

* :mod:`~httpstep.commands.config` -- view and modify global defaults.
* :mod:`~httpstep.commands.steps` -- list, show, and delete saved steps.

Each module exports a :class:`typer.Typer` sub-application that
:mod:`httpstep.app` registers on the root app.
"""
