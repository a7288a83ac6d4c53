"""Module entrypoint for ``python -m foldering``.

All argument parsing and runtime setup happen in ``foldering.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
