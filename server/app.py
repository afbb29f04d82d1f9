"""
FastAPI application exposing the Mermaid diagram parsers over HTTP.

Endpoints:
- GET  /api/health        liveness check
- GET  /api/tools         tool names and descriptions
- POST /api/tools/{name}  run a tool on {"mermaidSource": "..."}
"""

import logging
import sys

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mermaid_parser.errors import MermaidParserError
from server.config import LOG_LEVEL, SERVER_HOST, SERVER_PORT, configure_logging
from server.tools import TOOLS, error_to_dict

logger = logging.getLogger(__name__)


class ToolRequest(BaseModel):
    mermaidSource: str


app = FastAPI(title="Mermaid Diagram Parser")


# ──────────────────────────────────────────────────────────────────
# API
# ──────────────────────────────────────────────────────────────────

@app.get("/api/health")
async def health():
    return JSONResponse(content={"status": "ok"})


@app.get("/api/tools")
async def list_tools():
    return JSONResponse(content=[
        {"name": name, "description": tool["description"]}
        for name, tool in TOOLS.items()
    ])


@app.post("/api/tools/{name}")
def call_tool(name: str, body: ToolRequest):
    tool = TOOLS.get(name)
    if tool is None:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

    try:
        payload = tool["handler"](body.mermaidSource)
    except MermaidParserError as exc:
        logger.info("%s rejected input: %s", name, exc.message)
        return JSONResponse(content=error_to_dict(exc), status_code=400)
    return JSONResponse(content=payload)


# ──────────────────────────────────────────────────────────────────
# Entrypoint
# ──────────────────────────────────────────────────────────────────

def main() -> None:
    import uvicorn

    configure_logging(LOG_LEVEL)
    print(f"[app] Serving on http://{SERVER_HOST}:{SERVER_PORT}", file=sys.stderr)
    uvicorn.run("server.app:app", host=SERVER_HOST, port=SERVER_PORT,
                log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
