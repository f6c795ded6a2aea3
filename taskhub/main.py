"""Entry point: ``python -m taskhub.main`` or the ``taskhub`` console script."""

import uvicorn

from taskhub.api.app import create_app
from taskhub.config import get_settings

app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "taskhub.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
