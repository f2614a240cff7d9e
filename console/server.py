from __future__ import annotations

import os
import threading
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from common.config import load_params
from common.errors import EmptyGrid
from common.logging_setup import get_logger, setup_logging
from console.controller import TerrainToolsController
from console.service import build_controller

log = get_logger("console.server")


class CommandRequest(BaseModel):
    args: List[str] = []


def create_app(controller: TerrainToolsController) -> FastAPI:
    """
    HTTP host for one controller. Commands run one at a time so a request never
    observes a half-applied operation from another.
    """
    app = FastAPI(title="Terrain Tools API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # local tools only
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    lock = threading.Lock()
    tools = controller.tools

    @app.get("/health")
    def health():
        try:
            b = tools.grid.bounds()
            bounds: Optional[dict] = {"x": b.start_x, "y": b.start_y, "num_x": b.num_x, "num_y": b.num_y}
        except EmptyGrid:
            bounds = None
        return {
            "status": "ok",
            "regions": len(tools.grid),
            "region_size": tools.settings.region_size,
            "bounds": bounds,
            "formats": tools.registry.extensions(),
        }

    @app.get("/regions")
    def regions():
        return {"regions": tools.region_summaries()}

    @app.get("/commands")
    def commands():
        return {"commands": [{"name": s.name, "usage": s.usage, "help": s.help} for s in controller.commands.values()]}

    @app.post("/commands/{name}")
    def run_command(name: str, body: Optional[CommandRequest] = None):
        args = body.args if body is not None else []
        with lock:
            result = controller.execute(name, args)
        status = 200 if result.ok else 400
        return JSONResponse(result.to_dict(), status_code=status)

    return app


P = load_params(os.environ.get("TERRAIN_CONFIG", "config/params.yaml"))
app_controller = build_controller(P)
app = create_app(app_controller)


# -------- local dev entrypoint --------
if __name__ == "__main__":
    L = P.get("logging", {})
    setup_logging(level=L.get("level"), fmt=L.get("format"))
    S = P.get("server", {})
    log.info(
        "Starting terrain tools server",
        extra={"extra": {"host": S.get("host"), "port": S.get("port"), "regions": len(app_controller.tools.grid)}},
    )
    uvicorn.run(app, host=str(S.get("host", "0.0.0.0")), port=int(S.get("port", 8000)))
