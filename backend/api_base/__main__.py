"""
Run the API with uvicorn: `python -m api_base`.

The Server header is disabled at the protocol level; the security filter
strips it from application responses as well.
"""

import uvicorn

from api_base.config import settings


def main() -> None:
    uvicorn.run(
        "api_base.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
        reload=settings.is_development,
        server_header=False,
    )


if __name__ == "__main__":
    main()
