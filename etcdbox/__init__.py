"""Public package surface for etcdbox.

Exports ``main`` for programmatic CLI invocation.
The tree model lives in ``etcdbox.namespace_tree`` and connection handling
in ``etcdbox.session``.
"""

from __future__ import annotations

__version__ = "1.0.0"


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main", "__version__"]
