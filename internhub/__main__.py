"""Run the API with uvicorn: ``python -m internhub``."""

import uvicorn

from internhub.core.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        "internhub.main:app",
        host="0.0.0.0",
        port=settings.app_port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
