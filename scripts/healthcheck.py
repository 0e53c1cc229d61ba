"""
Container health check for the use-case generator API.

Exits 0 when every probed endpoint answers with a 2xx/3xx status.
"""

from __future__ import annotations

import os
import sys
from urllib.error import URLError
from urllib.request import urlopen

DEFAULT_PATHS = ("/health", "/api/status")


def probe(url: str, timeout: float) -> bool:
    try:
        with urlopen(url, timeout=timeout) as response:
            return 200 <= response.status < 400
    except (URLError, TimeoutError, ValueError):
        return False


def main(argv: list[str] | None = None) -> int:
    host = os.getenv("HEALTHCHECK_HOST", "127.0.0.1")
    port = os.getenv("PORT", "8000")
    paths = argv if argv else list(DEFAULT_PATHS)
    timeout = float(os.getenv("HEALTHCHECK_TIMEOUT_SECONDS", "2"))

    for path in paths:
        if not probe(f"http://{host}:{port}{path}", timeout):
            print(f"healthcheck failed: {path}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
