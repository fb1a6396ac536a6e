"""Run the Spoonjoy ASGI application under uvicorn."""

from __future__ import annotations

import asyncio
import os
from typing import Optional

import uvicorn

APP_PATH = "spoonjoy.server.app:app"


async def _serve_for(server: uvicorn.Server, duration: float) -> None:
    async def _shutdown() -> None:
        await asyncio.sleep(duration)
        server.should_exit = True

    asyncio.create_task(_shutdown())
    await server.serve()


def parse_duration(value: Optional[str]) -> Optional[float]:
    """Parse an optional positive run duration in seconds."""

    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid server duration '{value}': {exc}") from exc
    if parsed <= 0:
        raise SystemExit("Server duration must be greater than 0 when provided.")
    return parsed


def serve(
    host: str = "127.0.0.1",
    port: int = 8000,
    *,
    reload: bool = False,
    duration: Optional[float] = None,
) -> None:
    if reload and duration is not None:
        raise SystemExit("Reload cannot be combined with a fixed server duration.")

    if reload:
        uvicorn.run(APP_PATH, host=host, port=port, reload=True)
        return

    server = uvicorn.Server(uvicorn.Config(APP_PATH, host=host, port=port, reload=False))
    if duration is not None:
        asyncio.run(_serve_for(server, duration))
        return
    server.run()


def main() -> None:
    """Entry point for the ``spoonjoy-server`` script."""

    serve(
        host=os.environ.get("SPOONJOY_SERVER_HOST", "127.0.0.1"),
        port=int(os.environ.get("SPOONJOY_SERVER_PORT", "8000")),
        reload=os.environ.get("RELOAD") == "1",
        duration=parse_duration(os.environ.get("SPOONJOY_SERVER_DURATION")),
    )


if __name__ == "__main__":
    main()
