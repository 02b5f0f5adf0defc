"""Run the API with uvicorn."""

import uvicorn

from app.core.config import settings


def main() -> None:
    """Serve the application."""
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
