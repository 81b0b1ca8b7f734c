"""FastAPI application entrypoint for examplegen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import MissingDirectoryError, RunFatalError
from ..models import SampleFailure
from ..pipeline import CheckReport, CompileRun, Pipeline


class ProjectRequest(BaseModel):
    path: str


class CompileRequest(ProjectRequest):
    write: bool = False


class FailureModel(BaseModel):
    sample: str
    stage: str
    reason: str
    details: List[str] = []


class DocumentModel(BaseModel):
    path: str
    role: str
    sample: str | None = None


class CompileResponse(BaseModel):
    status: str
    documents: List[DocumentModel]
    failures: List[FailureModel]


class CheckResponse(BaseModel):
    status: str
    checked: int
    failures: List[FailureModel]


class HealthResponse(BaseModel):
    status: str


def _default_pipeline(path: str) -> Pipeline:
    return Pipeline.from_path(path)


def create_app(
    pipeline_factory: Callable[[str], Pipeline] = _default_pipeline,
) -> FastAPI:
    """Create the FastAPI application exposing examplegen operations."""

    app = FastAPI(title="examplegen service", version="1.0.0")

    async def _in_executor(func: Callable[[], Any]) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/compile", response_model=CompileResponse)
    async def compile_examples(payload: CompileRequest) -> CompileResponse:
        def _run() -> CompileRun:
            pipeline = pipeline_factory(payload.path)
            return pipeline.run_compile() if payload.write else pipeline.compile()

        run = await _in_executor(_run)
        return CompileResponse(
            status="ok" if run.ok else "failed",
            documents=[
                DocumentModel(path=document.path, role=document.role, sample=document.sample)
                for document in run.documents
            ],
            failures=_failures(run.failures),
        )

    @app.post("/validate", response_model=CheckResponse)
    async def validate_examples(payload: ProjectRequest) -> CheckResponse:
        report = await _in_executor(lambda: pipeline_factory(payload.path).run_validate())
        return _check_response(report)

    @app.post("/snapshot/verify", response_model=CheckResponse)
    async def verify_snapshot(payload: ProjectRequest) -> CheckResponse:
        report = await _in_executor(lambda: pipeline_factory(payload.path).run_snapshot_verify())
        return _check_response(report)

    @app.exception_handler(MissingDirectoryError)
    async def missing_directory_handler(
        _: Any, exc: MissingDirectoryError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RunFatalError)
    async def run_fatal_handler(
        _: Any, exc: RunFatalError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def _failures(failures: List[SampleFailure]) -> List[FailureModel]:
    return [
        FailureModel(sample=item.sample, stage=item.stage, reason=item.reason, details=list(item.details))
        for item in failures
    ]


def _check_response(report: CheckReport) -> CheckResponse:
    return CheckResponse(
        status="ok" if report.ok else "failed",
        checked=report.checked,
        failures=_failures(report.failures),
    )


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
