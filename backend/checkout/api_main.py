"""FastAPI entry point for the hosted checkout service."""

import uvicorn

from checkout.api import create_api
from checkout.core.logging import setup_logging

setup_logging()

app = create_api()


if __name__ == "__main__":
    uvicorn.run(
        "checkout.api_main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
