"""Entry point for running the game service via ``python -m tictactoe3d``."""

from __future__ import annotations

import uvicorn

from .config import load_settings
from .logging_setup import setup_logging


def main() -> None:
    """Start the FastAPI-powered tictactoe3d web server."""

    settings = load_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "tictactoe3d.ui:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
