"""
FastAPI application exposing AL Graph analysis and graph queries.
"""

from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query
from neo4j import GraphDatabase

from algraph.api.models import (
    AnalyzeRequest,
    EventLinksResponse,
    ExtensionModel,
    IntegrationsResponse,
    ObjectExtensionsResponse,
)
from algraph.api.queries import GraphQueryService
from algraph.config import Neo4jSettings, load_settings
from algraph.logging_config import get_logger
from algraph.pipeline.parser import ALParser


def create_app(
    settings: Neo4jSettings | None = None,
    query_service: GraphQueryService | None = None,
) -> FastAPI:
    app = FastAPI(title="AL Graph API", version="0.1.0")
    app.state.query_service = query_service
    app.state.parser = ALParser(logger=get_logger("algraph.api"))

    @app.on_event("shutdown")
    def shutdown() -> None:
        driver = getattr(app.state, "neo4j_driver", None)
        if driver:
            driver.close()

    def get_service() -> GraphQueryService:
        # Built on first use so /analyze works without a database.
        service = app.state.query_service
        if service is None:
            try:
                resolved = settings or load_settings()
            except RuntimeError as exc:
                raise HTTPException(status_code=503, detail=str(exc)) from exc
            driver = GraphDatabase.driver(
                resolved.uri,
                auth=(resolved.username, resolved.password),
            )
            app.state.neo4j_driver = driver
            service = GraphQueryService(driver, database=resolved.database)
            app.state.query_service = service
        return service

    def get_parser() -> ALParser:
        return app.state.parser

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/analyze", response_model=ExtensionModel)
    def analyze(body: AnalyzeRequest, parser: ALParser = Depends(get_parser)) -> ExtensionModel:
        extension = parser.parse_source(body.source, body.name)
        return ExtensionModel.from_ir(extension)

    @app.get("/integrations", response_model=IntegrationsResponse)
    def integrations(
        extension: str = Query(...),
        service: GraphQueryService = Depends(get_service),
    ) -> IntegrationsResponse:
        try:
            return service.integrations(extension=extension)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/events", response_model=EventLinksResponse)
    def events(
        name: str = Query(...),
        service: GraphQueryService = Depends(get_service),
    ) -> EventLinksResponse:
        try:
            return service.event_links(name=name)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/object-extensions", response_model=ObjectExtensionsResponse)
    def object_extensions(
        name: str = Query(...),
        service: GraphQueryService = Depends(get_service),
    ) -> ObjectExtensionsResponse:
        try:
            return service.object_extensions(name=name)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    return app
