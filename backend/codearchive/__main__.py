"""Main entry point for running the application."""

import uvicorn

from codearchive.config import settings


def run() -> None:
    uvicorn.run(
        "codearchive.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
