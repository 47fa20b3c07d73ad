"""Uvicorn entrypoint for the photo review API.

    uvicorn apps.api.main:app --reload

or, without the CLI:

    python -m apps.api.main

Building the app here keeps photoreview.app free of import-time settings
lookups, so tests can call create_app() with their own verifier.
"""

import os

import uvicorn

from photoreview.app import add_request_id_middleware, create_app

app = create_app()
add_request_id_middleware(app)

__all__ = ["app"]


if __name__ == "__main__":
    uvicorn.run(
        "apps.api.main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
    )
