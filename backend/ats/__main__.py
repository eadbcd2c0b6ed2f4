"""
Run the API server.

Usage:
    python -m ats
"""

import logging

import uvicorn

from ats.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run("ats.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
