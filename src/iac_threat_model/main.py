"""FastAPI application for the threat model engine."""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from . import __version__
from .builder import build_threat_model
from .errors import InvalidInputError
from .models import ThreatModelDoc, ThreatModelOptions, ThreatModelRequest
from .render import render_markdown

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="IaC Threat Model",
    description="Generates STRIDE threat models from declarative cloud infrastructure inventories",
    version=__version__,
)

# CORS - allow common development origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8000",
    ],
    allow_methods=["POST", "GET"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


def _build(request: ThreatModelRequest) -> ThreatModelDoc:
    try:
        return build_threat_model(
            request.resources,
            request.entry_points,
            request.data_stores,
            ThreatModelOptions(project_name=request.project_name),
        )
    except InvalidInputError as e:
        logger.error(f"Invalid threat model input: {e}")
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/threat-model", response_model=ThreatModelDoc)
async def threat_model(request: ThreatModelRequest) -> ThreatModelDoc:
    """
    Generate a threat model document.

    - **resources**: Resource inventory (id, type, service, props)
    - **entry_points**: Entry points (id, kind, is_public)
    - **data_stores**: Data stores (id, kind, contains_sensitive_data_likely, encryption_at_rest)
    - **project_name**: Optional project name for the report header
    """
    logger.info(f"Building threat model for {len(request.resources)} resources")
    return _build(request)


@app.post("/threat-model/report", response_class=PlainTextResponse)
async def threat_model_report(request: ThreatModelRequest) -> str:
    """Generate a threat model and return it as a Markdown report."""
    return render_markdown(_build(request))
