"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, status

from ckd_food_panel.api.schemas import PanelLookupResponse, PanelModel, ScaleRequest
from ckd_food_panel.app_logging import configure_logging
from ckd_food_panel.containers import AppContainer
from ckd_food_panel.domain.errors import AllSourcesExhausted
from ckd_food_panel.domain.panel import REFERENCE_PORTION_G
from ckd_food_panel.services.panel_builder import build_panel
from ckd_food_panel.services.scaling import scale_panel


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(logging.DEBUG if container.settings.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/panels")
    async def lookup_panel(
        request: Request,
        query: str = "",
        locale: str | None = None,
        portion: float = Query(default=REFERENCE_PORTION_G, ge=0, allow_inf_nan=False),
    ) -> PanelLookupResponse:
        """Resolve a food, build its reference panel and scale it to a portion."""
        state_container: AppContainer = request.app.state.container
        resolved_locale = locale or state_container.settings.default_locale
        try:
            resolution = await state_container.resolver.resolve(query, resolved_locale)
        except AllSourcesExhausted as exc:
            logger.exception("No nutrient source available", extra={"query": query})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
            ) from exc

        reference = build_panel(
            resolution.base,
            resolved_locale,
            resolution.source_tag,
            resolution.confidence,
        )
        return PanelLookupResponse(
            reference=PanelModel.from_domain(reference),
            panel=PanelModel.from_domain(scale_panel(reference, portion)),
        )

    @app.post("/panels/scale")
    async def scale_reference_panel(payload: ScaleRequest) -> PanelModel:
        """Rescale a reference panel retained by the client."""
        try:
            reference = payload.reference.to_domain()
            scaled = scale_panel(reference, payload.portion)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return PanelModel.from_domain(scaled)

    return app
