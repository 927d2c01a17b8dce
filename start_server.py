#!/usr/bin/env python3
"""Start the GFA API under uvicorn, honoring the PORT environment variable."""

import os
import sys

import uvicorn

# Make the src layout importable without an editable install.
SRC_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if os.path.isdir(SRC_PATH) and SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)


def _port() -> int:
    port = os.environ.get("PORT", "8000")
    try:
        return int(port)
    except ValueError:
        print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
        return 8000


def main() -> int:
    port = _port()
    try:
        import gfa.main  # noqa: F401
    except ImportError as e:
        print(f"Failed to import gfa.main: {e}", file=sys.stderr)
        return 1

    print(f"Starting server on port {port}...", file=sys.stderr)
    uvicorn.run(
        "gfa.main:app",
        host="0.0.0.0",
        port=port,
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_level=os.environ.get("GFA_LOG_LEVEL", "info"),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
