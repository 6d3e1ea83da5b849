"""
BookCourier - entry point.

Runs the API under uvicorn:

    bookcourier
    # or
    uvicorn bookcourier.api.app:app --reload
"""

from __future__ import annotations

import logging

import uvicorn

from bookcourier.config import get_settings


def main() -> None:
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        "bookcourier.api.app:app",
        host=settings.api_host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
