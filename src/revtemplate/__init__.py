"""revtemplate: a commit template language.

Templates are expression trees built against a repository snapshot and
rendered once per commit. See ``revtemplate.commit`` for the language and
``revtemplate.repo`` for the snapshot model.
"""

__version__ = "0.1.0"
