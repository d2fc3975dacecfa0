"""FastAPI app: POST /triage (run the support pipeline), GET /triage/:run_id, health."""
import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ticketflow.actions import build_support_pipeline
from ticketflow.config import get_config, validate_config
from ticketflow.pipeline.status import CONFIG_INVALID
from ticketflow.runs import get_run, store_run

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_problems = validate_config(get_config())
if _problems:
    raise ValueError("Invalid ticketflow configuration: " + "; ".join(_problems))

app = FastAPI(title="ticketflow", version="0.1.0")


class TriageRequest(BaseModel):
    message: str = ""
    customer_id: str | None = None
    email: str | None = None
    state: dict[str, Any] = Field(default_factory=dict)
    """Extra initial state passed to the pipeline."""


@app.post("/triage")
def post_triage(body: TriageRequest):
    """Run the support pipeline synchronously and return the run payload.

    200 for completed and partially_completed runs (status is in the body); 422 when the
    action graph is invalid.
    """
    state = dict(body.state)
    if body.customer_id:
        state["customer_id"] = body.customer_id
    if body.email:
        state["email"] = body.email
    run = build_support_pipeline().run(body.message or "", state)
    payload = run.to_payload()
    store_run(run.run_id, payload)
    if run.status == CONFIG_INVALID:
        return JSONResponse(status_code=422, content=payload)
    return payload


@app.get("/triage/{run_id}")
def get_triage_run(run_id: str):
    """Return the payload of an earlier run in this process, or 404."""
    payload = get_run(run_id)
    if payload is None:
        raise HTTPException(status_code=404, detail="Unknown run_id")
    return payload


@app.get("/health")
def health():
    cfg = get_config()
    return {"status": "ok", "notifier": cfg.notifier_type}
