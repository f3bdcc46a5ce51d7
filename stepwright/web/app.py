from __future__ import annotations
import json
from fastapi import FastAPI, Request, HTTPException
from ..core.errors import NotFoundError, ValidationError, describe_error
from ..debug.session import DebugSession

def create_app(session: DebugSession) -> FastAPI:
    app = FastAPI(title="Stepwright Debugger", docs_url=None, redoc_url=None)
    app.state.session = session

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/feature")
    def get_feature() -> dict:
        try:
            return app.state.session.get_feature().to_dict()
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @app.post("/api/feature/reload")
    async def reload_feature() -> dict:
        try:
            feature = await app.state.session.reload()
        except Exception as e:
            # la session continue avec la feature précédente
            raise HTTPException(status_code=500, detail=describe_error(e))
        return feature.to_dict()

    @app.get("/api/feature/variables")
    async def get_variables() -> dict:
        return app.state.session.get_variables()

    @app.post("/api/feature/variables")
    async def set_variables(request: Request) -> dict:
        try:
            body = await request.json()
        except json.JSONDecodeError:
            raise HTTPException(status_code=400, detail="Corps JSON invalide")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Corps attendu: {\"variables\": {...}}")
        try:
            await app.state.session.set_variables(body.get("variables"))
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"status": "ok"}

    @app.post("/api/scenario/{scenario_id}/step/{step_id}")
    async def run_step(scenario_id: int, step_id: int) -> dict:
        try:
            reply = await app.state.session.run_step(scenario_id, step_id)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return reply.to_dict()

    return app
