from __future__ import annotations

import os

import uvicorn

from prowriter.shared.config import get_settings


def main() -> None:
    settings = get_settings()
    reload = os.getenv("PROWRITER_API_RELOAD", "0").strip().lower() in {"1", "true", "yes"}
    uvicorn.run(
        "prowriter.interfaces.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
