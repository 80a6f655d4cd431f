"""Server entry point."""

from typing import Optional

from ..config import get_config


def run_server(port: Optional[int] = None):
    """Run the FastAPI server.

    This function starts the uvicorn server with the app factory from
    genre_recommender/api/.

    Args:
        port: Port override; defaults to ``serving.api.port``
    """
    import uvicorn

    config = get_config()
    workers = int(config.get("serving.api.workers", 1))
    host = config.get("serving.api.host", "0.0.0.0")
    port = int(port or config.get("serving.api.port", 8080))

    if workers > 1:
        uvicorn.run(
            "genre_recommender.api:create_app",
            factory=True,
            host=host,
            port=port,
            workers=workers,
            log_level="info"
        )
    else:
        from ..api import create_app
        app = create_app()
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="info"
        )
