import asyncio
import base64
import json
import logging
import time
from typing import Any

from src.config.settings import Settings
from src.pipeline.report_builder import NO_RESULTS_MESSAGE, build_report_rows
from src.report.pdf_renderer import PDFReportRenderer, RendererLayout
from src.utils.error_handlers import (
    ConfigurationError,
    ReportError,
    create_correlation_id,
    error_response_body,
    error_status_code,
    log_structured_error,
)
from src.utils.source_manager import SourceManager

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _text_response(status_code: int, body: str, correlation_id: str) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "text/plain; charset=utf-8",
            "X-Correlation-ID": correlation_id,
        },
        "body": body,
        "isBase64Encoded": False,
    }


async def _generate(settings: Settings) -> bytes | None:
    async with SourceManager.get_source(settings) as source:
        rows = await build_report_rows(source, settings)

    if not rows:
        return None

    renderer = PDFReportRenderer(RendererLayout.from_settings(settings))
    return renderer.render(rows).content


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Serverless handler producing the missing-contacts report.

    Args:
        event: API Gateway style request event (unused beyond logging)
        context: Lambda context object

    Returns:
        Response with a base64 PDF body, the no-results message, or an error
    """
    start_time = time.time()
    correlation_id = create_correlation_id("report")
    logger.info(json.dumps({
        "event_type": "report_request",
        "timestamp": int(start_time),
        "correlation_id": correlation_id,
        "function_name": getattr(context, "function_name", "generate_report"),
        "path": (event or {}).get("path"),
    }))

    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        log_structured_error(e, {"stage": "configuration"}, correlation_id=correlation_id)
        return _text_response(500, e.message, correlation_id)

    try:
        pdf_bytes = asyncio.run(_generate(settings))
    except ReportError as e:
        log_structured_error(e, {"stage": "report"}, correlation_id=correlation_id)
        return _text_response(error_status_code(e), error_response_body(e), correlation_id)

    if pdf_bytes is None:
        return _text_response(200, NO_RESULTS_MESSAGE, correlation_id)

    logger.info(f"Report generated in {time.time() - start_time:.2f}s ({len(pdf_bytes)} bytes)")
    return {
        "statusCode": 200,
        "headers": {
            "Content-Type": "application/pdf",
            "Content-Disposition": f"attachment; filename={settings.report_filename}.pdf",
            "X-Correlation-ID": correlation_id,
        },
        "body": base64.b64encode(pdf_bytes).decode("ascii"),
        "isBase64Encoded": True,
    }
