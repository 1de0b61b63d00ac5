# fintracker/__main__.py
import uvicorn

from .config import get_settings
from .logging_utils import get_logger

LOGGER = get_logger(__name__)


def run() -> None:
    settings = get_settings()
    LOGGER.info("Server running on port %s (%s)", settings.port, settings.environment)
    uvicorn.run(
        "fintracker.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        proxy_headers=True,
    )


if __name__ == "__main__":
    run()
