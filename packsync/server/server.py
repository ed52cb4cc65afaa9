"""
PackSync Server - Main FastAPI Application

Publishes a directory as a modpack. Every request passes through the
configured security strategy before routing, and every accepted response
carries a fresh Challenge header.
"""

import argparse
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import FileResponse, PlainTextResponse

from .. import __version__
from ..exceptions import PackSyncConfigError
from ..managers import ConfigManager, DEFAULT_SERVER_CONFIG, default_config_path
from ..protocol import AUTHENTICATE_PATH, FILES_PATH_PREFIX, MANIFEST_PATH
from ..security import SecurityStrategy, create_security_strategy
from .manifest_builder import build_manifest

# Create logger
logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "packsync-server.json"


# ==================== Logging ====================

def setup_server_logging(log_level: str = "INFO", logs_dir: Path = Path("logs")):
    """
    Configure logging to write to both console and a rotating file.

    Args:
        log_level: Logging level name
        logs_dir: Directory for log files
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_filename = logs_dir / f"packsync-server-{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            # File handler with rotation (max 10MB per file, keep 10 backup files)
            RotatingFileHandler(
                log_filename,
                maxBytes=10 * 1024 * 1024,
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )


# ==================== FastAPI Application ====================

def create_app(served_dir: Union[str, Path], security_strategy: SecurityStrategy,
               forge_version: Optional[str] = None) -> FastAPI:
    """
    Build the modpack server application.

    The manifest is built from served_dir at startup.

    Args:
        served_dir: Directory whose files are published
        security_strategy: Strategy validating requests and issuing challenges
        forge_version: Optional loader version advertised in the manifest

    Returns:
        FastAPI application
    """
    served_dir = Path(served_dir).resolve()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("PackSync Server starting up...")
        app.state.manifest = build_manifest(served_dir, forge_version)
        logger.info("Server startup complete")

        yield

        logger.info("PackSync Server shutting down...")

    app = FastAPI(
        title="PackSync Server",
        description="Modpack distribution server",
        version=__version__,
        lifespan=lifespan
    )

    # ==================== Security Middleware ====================

    @app.middleware("http")
    async def security_middleware(request: Request, call_next):
        if not security_strategy.accept_connection_request(request):
            return PlainTextResponse("Forbidden", status_code=status.HTTP_403_FORBIDDEN)

        response = await call_next(request)
        security_strategy.on_response_sent(request, response)
        return response

    # ==================== Modpack Endpoints ====================

    @app.get(AUTHENTICATE_PATH, tags=["Modpack"])
    async def authenticate():
        """Handshake endpoint; the Challenge header is the only payload."""
        return Response(status_code=status.HTTP_200_OK)

    @app.get(MANIFEST_PATH, tags=["Modpack"])
    async def server_manifest(request: Request):
        """Return the manifest built at startup."""
        return Response(content=request.app.state.manifest.to_json(), media_type="application/json")

    @app.get(FILES_PATH_PREFIX + "{file_name:path}", tags=["Modpack"])
    async def download_file(file_name: str, request: Request):
        """
        Download one manifest file.

        Args:
            file_name: fileName as listed in the manifest

        Raises:
            HTTPException: If the file is not part of the modpack
        """
        if request.app.state.manifest.find(file_name) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Not in modpack: {file_name}")

        file_path = served_dir / file_name
        if not file_path.is_file():
            logger.error(f"Manifest file missing on disk: {file_path}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"File not found: {file_name}")

        logger.info(f"Serving {file_name}")
        return FileResponse(file_path, media_type="application/octet-stream")

    return app


# ==================== Main Entry Point ====================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the server using uvicorn with settings from packsync-server.json.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(description='PackSync - modpack distribution server')
    parser.add_argument('--config', type=Path, default=None,
                        help=f'Config file (default: {CONFIG_FILE_NAME} in the current directory)')
    args = parser.parse_args(argv)

    config_mgr = ConfigManager(args.config or default_config_path(CONFIG_FILE_NAME), DEFAULT_SERVER_CONFIG)
    try:
        config_mgr.load_config()
        setup_server_logging(config_mgr.get("log_level", "INFO"), config_mgr.config_file.parent / "logs")
        security = create_security_strategy(config_mgr.resolve_security_settings())
    except PackSyncConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    served_dir = Path(config_mgr.get("served_dir"))
    if not served_dir.is_dir():
        logger.error(f"Served directory does not exist: {served_dir}")
        return 2

    app = create_app(served_dir, security, config_mgr.get("forge_version"))

    logger.info("Starting PackSync Server...")
    uvicorn.run(
        app,
        host=config_mgr.get("host"),
        port=int(config_mgr.get("port")),
        log_level="info"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
