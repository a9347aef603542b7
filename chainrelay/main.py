from __future__ import annotations

from chainrelay.logging.logger import init_logging

init_logging()

import uvicorn

from chainrelay.configuration.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "chainrelay.api.app:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT
    )
