import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, Response

from src.api.dependencies import get_data_source, get_settings
from src.api.models import HealthResponse
from src.config.settings import Settings
from src.pipeline.report_builder import NO_RESULTS_MESSAGE, build_report_rows
from src.report.pdf_renderer import PDFReportRenderer, RendererLayout
from src.sources.interface import DataSourceInterface
from src.utils.error_handlers import ClientDisconnectedError

router = APIRouter()
logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.5

T = TypeVar("T")


async def cancel_on_disconnect(request: Request, work: Awaitable[T]) -> T:
    """Await work, cancelling it if the HTTP client goes away first.

    Raises:
        ClientDisconnectedError: If the client disconnected before work finished
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning(f"Client disconnected from {request.url.path}, cancelling report")
                task.cancel()
                raise ClientDisconnectedError()
    finally:
        if not task.done():
            task.cancel()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version="1.0.0")


@router.get(
    "/generatePDF",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}, "text/plain": {}}, "description": "PDF report or no-results message"},
        500: {"content": {"text/plain": {}}, "description": "Upstream, configuration or rendering error"},
        504: {"content": {"text/plain": {}}, "description": "Upstream calls timed out"},
    },
)
async def generate_pdf(
    request: Request,
    settings: Settings = Depends(get_settings),
    source: DataSourceInterface = Depends(get_data_source),
) -> Response:
    rows = await cancel_on_disconnect(request, build_report_rows(source, settings))

    if not rows:
        logger.info("No clients missing phone or email")
        return PlainTextResponse(NO_RESULTS_MESSAGE)

    renderer = PDFReportRenderer(RendererLayout.from_settings(settings))
    report = await run_in_threadpool(renderer.render, rows)

    filename = f"{settings.report_filename}.pdf"
    return Response(
        content=report.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Content-Length": str(len(report.content)),
        },
    )
