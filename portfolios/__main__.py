"""Allow ``python -m portfolios`` to launch the desktop."""

from __future__ import annotations

import sys


def main() -> None:
    from portfolios import run
    raise SystemExit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
