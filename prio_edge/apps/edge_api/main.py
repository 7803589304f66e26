"""ASGI entry point: ``uvicorn prio_edge.apps.edge_api.main:app``."""

from __future__ import annotations

import os

from prio_edge.apps.edge_api.app import create_app

app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "prio_edge.apps.edge_api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8788")),
        proxy_headers=True,
    )


if __name__ == "__main__":
    run()
