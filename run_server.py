"""Entry point for running the collaborative feed API with Uvicorn."""
from __future__ import annotations

import os

import uvicorn

from collabfeed.config import get_settings


def main() -> None:
  host = os.getenv("COLLABFEED_HOST", "0.0.0.0")
  port = int(os.getenv("COLLABFEED_PORT", "8000"))
  reload = os.getenv("UVICORN_RELOAD", "true").lower() == "true"
  uvicorn.run(
    "collabfeed.main:app",
    host=host,
    port=port,
    reload=reload,
    log_level=get_settings().log_level.lower(),
  )


if __name__ == "__main__":
  main()
