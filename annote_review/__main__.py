# annote_review/__main__.py
from __future__ import annotations

from typing import List, Optional

from .app import run_app


def main(argv: Optional[List[str]] = None) -> int:
    return run_app(argv)


if __name__ == "__main__":
    raise SystemExit(main())
