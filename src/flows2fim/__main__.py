"""Module entrypoint for `python -m flows2fim`."""

from __future__ import annotations

from flows2fim.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
