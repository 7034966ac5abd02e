"""
FastAPI app exposing the review pipeline.

Endpoints:
- POST /review  multipart form: `prompt` (text) and optional `file`
- GET  /health
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from design_review import config
from design_review import logger as logger_mod
from design_review.llm.base import CompletionGateway
from design_review.llm.factory import build_gateway
from design_review.review.pipeline import (
    CancelToken,
    PipelinePolicy,
    PipelineResult,
    PipelineState,
    ReviewPipeline,
)

log = logger_mod.get_logger()

_STATUS_BY_KIND = {
    "InvalidRequest": 400,
    "TransportError.Auth": 502,
    "TransportError.Network": 502,
    "TransportError.RateLimited": 429,
    "TransportError.Timeout": 504,
    "NoStructuredPayload": 422,
    "MalformedPayload": 422,
    "SchemaViolation": 422,
    "Cancelled": 499,
}


def _error_response(status_code: int, kind: str, message: str) -> JSONResponse:
    error = {"kind": kind, "message": message, "retryable_by_caller": False}
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})


def result_to_response(result: PipelineResult) -> JSONResponse:
    if result.state is PipelineState.DONE:
        return JSONResponse(content={"ok": True, "result": result.value})

    error = result.error
    body: Dict[str, Any] = {"ok": False, "error": error.to_dict()}
    return JSONResponse(status_code=_STATUS_BY_KIND.get(error.kind, 500), content=body)


async def _watch_disconnect(request: Request, cancel: CancelToken) -> None:
    while not cancel.cancelled:
        if await request.is_disconnected():
            log.info("Client disconnected; cancelling review")
            cancel.cancel()
            return
        await asyncio.sleep(0.25)


def create_app(
    gateway: Optional[CompletionGateway] = None,
    policy: Optional[PipelinePolicy] = None,
) -> FastAPI:
    """Build the app. The gateway is created once here and shared read-only."""

    pipeline = ReviewPipeline(gateway or build_gateway(), policy)

    app = FastAPI(title="design-review")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.pipeline = pipeline

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    @app.post("/review")
    async def review_design(
        request: Request,
        prompt: str = Form(""),
        file: Optional[UploadFile] = File(None),
    ) -> JSONResponse:
        artifact_name = config.DEFAULT_ARTIFACT_NAME
        artifact_kind = config.DEFAULT_ARTIFACT_KIND
        if file is not None:
            data = await file.read(config.MAX_UPLOAD_BYTES + 1)
            if len(data) > config.MAX_UPLOAD_BYTES:
                return _error_response(
                    413,
                    "InvalidRequest",
                    f"file exceeds {config.MAX_UPLOAD_BYTES} bytes",
                )
            artifact_name = file.filename or artifact_name
            artifact_kind = file.content_type or artifact_kind

        cancel = CancelToken()
        watcher = asyncio.create_task(_watch_disconnect(request, cancel))
        try:
            result = await run_in_threadpool(
                pipeline.review, prompt, artifact_name, artifact_kind, cancel=cancel
            )
        finally:
            watcher.cancel()

        if not result.ok:
            log.warning("Review request failed: %s", result.error.message)
        return result_to_response(result)

    return app


def main() -> None:
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
