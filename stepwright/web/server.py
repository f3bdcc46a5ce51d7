from __future__ import annotations
import asyncio
import uvicorn
from ..config import Settings
from ..core.registry import StepRegistry
from ..debug.session import DebugSession
from ..tools.logs import log_event
from .app import create_app

def serve(settings: Settings, feature_path: str, script_paths: list[str], *, host: str | None = None, port: int | None = None) -> None:
    """Ouvre une session de debug sur la feature et la sert via uvicorn (bloquant)."""
    registry = StepRegistry(default_timeout_ms=settings.general.default_timeout_ms)
    session = DebugSession(registry, feature_path, script_paths, settings=settings)
    asyncio.run(session.open())

    host = host or settings.debug.host
    port = int(port or settings.debug.port)
    app = create_app(session)
    log_event(settings, f"[debug] serving {feature_path} on http://{host}:{port}/")
    print(f"Navigate to http://{host}:{port}/api/feature")
    uvicorn.run(app, host=host, port=port, log_level="info")
