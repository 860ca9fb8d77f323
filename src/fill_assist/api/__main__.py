"""Entry point for running the API as a module.

Usage:
    python -m fill_assist.api
"""

import uvicorn

from fill_assist.config.settings import settings

if __name__ == "__main__":
    uvicorn.run("fill_assist.api.app:app", host=settings.api.host, port=settings.api.port)
