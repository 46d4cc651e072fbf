"""Module entrypoint for ``python -m etcdbox``.

All argument parsing and runtime setup happen in ``etcdbox.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
