"""
HTTP query server for dartlint diagnostics.

Serves the result of the engine's latest completed run. Reads never block on
a run in progress: they see the previous result until the new one is
published.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from dartlint import __version__
from dartlint.config import find_config_file, load_config
from dartlint.discovery import discover_dart_files, load_sources
from dartlint.errors import AnalysisCancelled
from dartlint.registry import build_registry
from dartlint.runner import AnalysisEngine

from .models import (
    AnalyzeRequest, DiagnosticsQuery, DiagnosticsResponse, RpcRequest, RpcResponse, StatsModel
)
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AnalysisEngine:
    config_path = settings.config_path
    if not config_path and settings.project_path:
        config_path = find_config_file(settings.project_path)
    return AnalysisEngine(build_registry(), load_config(config_path))


def run_project_analysis(engine: AnalysisEngine, path: str):
    files = discover_dart_files(path, engine.config.exclude_patterns)
    return engine.run(load_sources(files))


def _engine(request: Request) -> AnalysisEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Analysis engine is not initialized")
    return engine


def create_app(engine: Optional[AnalysisEngine] = None, project_path: Optional[str] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app around an engine.

    Without an engine one is built at startup from settings, and the
    configured project (if any) is analyzed before serving.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.engine is None:
            app.state.engine = build_engine(settings)
            if app.state.project_path:
                result = run_project_analysis(app.state.engine, app.state.project_path)
                logger.info(f"[startup] Analyzed {result.files_analyzed} files: {len(result)} diagnostics")
        yield

    app = FastAPI(title="dartlint diagnostics", version=__version__, lifespan=lifespan)
    app.state.engine = engine
    app.state.project_path = project_path or settings.project_path

    allowed_origins = settings.allowed_origins or ["http://localhost:*", "http://127.0.0.1:*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    @app.get("/health")
    def health(request: Request):
        """Health check endpoint."""
        engine = getattr(request.app.state, "engine", None)
        return {
            "status": "ok",
            "version": __version__,
            "engine_state": engine.state.value if engine is not None else "uninitialized",
            "timestamp": int(time.time()),
        }

    @app.get("/diagnostics", response_model=DiagnosticsResponse)
    def get_diagnostics(
        request: Request,
        category: Optional[str] = Query(None),
        severity: Optional[str] = Query(None),
        file: Optional[str] = Query(None),
    ):
        engine = _engine(request)
        try:
            criteria = DiagnosticsQuery(category=category, severity=severity, file=file)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid query parameters: {e.errors()}")
        result = engine.get_filtered(criteria.category, criteria.severity, criteria.file)
        return DiagnosticsResponse(state=engine.state.value, count=len(result), diagnostics=result.to_list())

    @app.get("/stats", response_model=StatsModel)
    def get_stats(request: Request):
        return StatsModel(**_engine(request).get_stats().to_dict())

    @app.post("/analyze", response_model=StatsModel)
    def analyze(request: Request, body: AnalyzeRequest):
        engine = _engine(request)
        path = body.path or request.app.state.project_path
        if not path:
            raise HTTPException(status_code=400, detail="No project path configured")
        try:
            result = run_project_analysis(engine, path)
        except AnalysisCancelled:
            raise HTTPException(status_code=409, detail="Analysis was cancelled")
        return StatsModel(**result.stats().to_dict())

    @app.post("/rpc", response_model=RpcResponse)
    def rpc(request: Request, body: RpcRequest):
        """Method-dispatch endpoint for protocol bridges."""
        engine = _engine(request)
        if body.method == "get_all_errors":
            return RpcResponse(success=True, data=engine.get_all_diagnostics().to_list())
        if body.method == "get_errors":
            try:
                criteria = DiagnosticsQuery(**body.params)
            except (ValidationError, TypeError) as e:
                return RpcResponse(success=False, error=f"Invalid query parameters: {e}")
            result = engine.get_filtered(criteria.category, criteria.severity, criteria.file)
            return RpcResponse(success=True, data=result.to_list())
        if body.method == "get_stats":
            return RpcResponse(success=True, data=engine.get_stats().to_dict())
        return RpcResponse(success=False, error=f"Unknown method: {body.method}")

    return app


def cli():
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    cli()
