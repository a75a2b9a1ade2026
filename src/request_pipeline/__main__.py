"""Run the server: ``python -m request_pipeline``."""

from __future__ import annotations

import uvicorn

from request_pipeline.app import create_app
from request_pipeline.config import get_settings
from request_pipeline.observability import configure_logging, get_logger


def main() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, format=settings.log_format)

    app = create_app(settings)
    get_logger(__name__).info("server_starting", host=settings.host, port=settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
