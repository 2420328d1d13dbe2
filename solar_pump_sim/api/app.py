from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import (
    profiles_router,
    pumps_router,
    simulation_router,
)


def create_app() -> FastAPI:
    """
    Build the HTTP front end of the pump simulator.

    Routes are grouped by domain (simulation runs, solar export parsing,
    pump datasheets), all under ``/api``. CORS accepts any origin.
    """
    app = FastAPI(
        title="Solar Water Pump Simulator API",
        version="0.1.0",
        description="Estimate how reliably a solar pump and storage tank meet a daily water demand.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in (simulation_router, profiles_router, pumps_router):
        app.include_router(router)

    return app


app = create_app()
