"""Built-in CLI sub-commands for specview.

* :mod:`~specview.commands.inspect` -- read-only views of one document
  (``validate``, ``tags``, ``operations``, ``show``, ``examples``,
  ``summary``, ``synth``), registered directly on the root app.
* :mod:`~specview.commands.watch` -- live re-parsing of a document file.
* :mod:`~specview.commands.config` -- the ``config`` sub-application.
"""
