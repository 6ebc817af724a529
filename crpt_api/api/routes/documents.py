import asyncio
import contextlib
import logging
import threading
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from starlette.concurrency import run_in_threadpool

from crpt_api.core.rate_limit import get_document_service
from crpt_api.schemas.document import CreateDocumentRequest, CreateDocumentResponse
from crpt_api.services.document_service import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Documents"])

DISCONNECT_POLL_SECONDS = 0.1


async def _cancel_on_disconnect(request: Request, cancel_event: threading.Event) -> None:
    """Set cancel_event once the client goes away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("gateway.client_disconnected", extra={"path": request.url.path})
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post(
    "/documents",
    response_model=CreateDocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_document(
    body: CreateDocumentRequest,
    request: Request,
    service: Annotated[DocumentService, Depends(get_document_service)],
) -> CreateDocumentResponse:
    """Submit a document to the remote API under the shared rate limit.

    The blocking submission runs on the threadpool so a request waiting for a
    permit holds a worker thread, not the event loop. If the client
    disconnects while waiting, the wait is cancelled: no permit is taken and
    nothing is sent.

    Returns:
        CreateDocumentResponse: Remote status code and response body.

    Raises:
        RateLimitTimeoutAppError: 429 when APP_RATE_LIMIT_MAX_WAIT_SECONDS elapsed.
        InterruptedAppError: 503 when the client disconnected while waiting.
        RemoteCallAppError: 502 when the remote API failed the call.
    """
    cancel_event = threading.Event()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, cancel_event))
    try:
        return await run_in_threadpool(
            service.create_document,
            body.document,
            body.signature,
            cancel_event=cancel_event,
        )
    finally:
        # Stops the watcher loop; the submission has already returned
        cancel_event.set()
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
