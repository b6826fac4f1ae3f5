"""
Run the Todo API with uvicorn.

Usage:
    python -m todo_api

Settings come from the environment; a .env file in the working directory is
loaded first.
"""
from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from .main import create_app
from .settings import get_settings


def main() -> None:
    load_dotenv()
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Starting server on port %d", settings.port)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
