"""Single-port server for the dashboard API."""
import os

import uvicorn

from stockdash.api.app import create_app
from stockdash.cli import setup_logging

setup_logging(os.environ.get("LOG_LEVEL", "").upper() == "DEBUG")

app = create_app(use_lifespan=True)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8080")), log_config=None)
