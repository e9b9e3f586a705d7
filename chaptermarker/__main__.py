"""Module entrypoint for running chaptermarker as ``python -m chaptermarker``."""

from __future__ import annotations

from chaptermarker.cli import main


if __name__ == "__main__":
    main()
