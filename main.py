#!/usr/bin/env python3
import os

import uvicorn

from gridengine.app import create_app

# Create the FastAPI app
app = create_app()


if __name__ == "__main__":
    host = os.getenv("GRIDENGINE_HOST", "0.0.0.0")
    port = int(os.getenv("GRIDENGINE_PORT", "8000"))
    reload_enabled = os.getenv("GRIDENGINE_RELOAD", "false").lower() == "true"

    print(f"Starting grid engine on {host}:{port}")

    uvicorn.run("main:app", host=host, port=port, reload=reload_enabled)
