"""
Application FastAPI de StreamVault.

Initialise l'application web avec le Container DI et convertit les erreurs
du coeur en réponses JSON. Les routes sont montées par la couche de routage.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from streamvault.container import Container
from streamvault.core.errors import StreamVaultError
from streamvault.logging_config import configure_from_settings
from streamvault.web.deps import http_error_for


def create_app(container: Optional[Container] = None, configure_logs: bool = True) -> FastAPI:
    """
    Crée l'application.

    Args:
        container: Container à utiliser (un nouveau Container par défaut)
        configure_logs: Installe les handlers loguru depuis les Settings au démarrage
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Configure le logging et prépare le répertoire de données au démarrage."""
        settings = app.state.container.config()
        if configure_logs:
            configure_from_settings(settings)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"StreamVault demarre, donnees dans {settings.data_dir}")
        yield

    app = FastAPI(title="StreamVault", lifespan=lifespan)
    app.state.container = container or Container()

    @app.exception_handler(StreamVaultError)
    async def _core_error_handler(request: Request, exc: StreamVaultError) -> JSONResponse:
        http_exc = http_error_for(exc)
        return JSONResponse(
            status_code=http_exc.status_code, content=http_exc.detail, headers=http_exc.headers
        )

    return app
