import logging
from tempfile import SpooledTemporaryFile
from typing import Optional
from urllib.parse import quote

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Header,
    Path,
    Request,
    UploadFile,
    status,
)
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from starlette.requests import ClientDisconnect

from files_gateway.config.settings import Settings
from files_gateway.dependencies import get_app_settings, get_gateway
from files_gateway.errors import InvalidInput, PartialWrite
from files_gateway.schemas import (
    ListObjectsQueryParams,
    ListObjectsResponse,
    ObjectDescriptor,
    ObjectMetadata,
)
from files_gateway.services.gateway import GatewayService

logger = logging.getLogger(__name__)

router = APIRouter()


def _declared_length(request: Request) -> Optional[int]:
    """Content-Length of the request, or None for chunked bodies."""
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidInput(f"Invalid Content-Length header: {raw}") from exc


async def _spool_request_body(request: Request, max_memory_bytes: int) -> SpooledTemporaryFile:
    """
    Copy the request body into a spooled temporary file.

    Bodies up to ``max_memory_bytes`` stay in memory; larger ones spill to disk.
    A client disconnect discards what was received and nothing reaches the store.
    """
    spool = SpooledTemporaryFile(max_size=max_memory_bytes)
    try:
        async for chunk in request.stream():
            spool.write(chunk)
    except ClientDisconnect as exc:
        spool.close()
        logger.warning(f"Client disconnected while uploading {request.url.path}")
        raise PartialWrite("Client disconnected before the upload completed") from exc
    except BaseException:
        spool.close()
        raise
    spool.seek(0)
    return spool


@router.get("/objects", response_model=ListObjectsResponse)
async def list_objects(
    query_params: ListObjectsQueryParams = Depends(),
    gateway: GatewayService = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> ListObjectsResponse:
    """
    List the objects in the bucket.

    Args:
        query_params: Prefix filter and recursion flag

    Returns:
        ListObjectsResponse: Every matching object descriptor
    """
    objects = await run_in_threadpool(
        gateway.list_objects,
        settings.s3_bucket_name,
        query_params.prefix,
        query_params.recursive,
    )
    return ListObjectsResponse(objects=objects, count=len(objects))


@router.put("/objects/{object_path:path}", response_model=ObjectDescriptor)
async def put_object(
    request: Request,
    object_path: str = Path(..., description="Target path of the object"),
    x_object_title: Optional[str] = Header(None, description="Optional object title"),
    x_object_description: Optional[str] = Header(None, description="Optional object description"),
    gateway: GatewayService = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> ObjectDescriptor:
    """
    Upload the raw request body to `object_path`, replacing any existing object.

    The body is streamed; a declared Content-Length must match the bytes received.
    """
    declared_length = _declared_length(request)
    metadata = ObjectMetadata(title=x_object_title, description=x_object_description)
    spool = await _spool_request_body(request, settings.upload_spool_max_bytes)
    try:
        return await run_in_threadpool(
            gateway.put_object,
            settings.s3_bucket_name,
            object_path,
            spool,
            declared_length,
            metadata,
        )
    finally:
        spool.close()


@router.post("/objects", response_model=ObjectDescriptor, status_code=status.HTTP_201_CREATED)
async def upload_object(
    file: UploadFile = File(..., description="The file to upload"),
    path: Optional[str] = Form(None, description="Target path; defaults to the uploaded filename"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    gateway: GatewayService = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> ObjectDescriptor:
    """
    Upload a file from a multipart form.

    Args:
        file: The file to upload
        path: Target path (optional, the original filename is used otherwise)
        title: Optional object title
        description: Optional object description

    Returns:
        ObjectDescriptor: The stored object
    """
    target_path = path or file.filename
    metadata = ObjectMetadata(title=title, description=description)
    try:
        return await run_in_threadpool(
            gateway.put_object,
            settings.s3_bucket_name,
            target_path,
            file.file,
            file.size,
            metadata,
        )
    finally:
        await file.close()


@router.get(
    "/objects/{object_path:path}",
    responses={status.HTTP_200_OK: {"content": {"application/octet-stream": {}}}},
)
async def get_object(
    object_path: str = Path(..., description="Path of the object to download"),
    gateway: GatewayService = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> StreamingResponse:
    """
    Download an object as a byte stream.

    The backend stream is closed when the response finishes, fails, or the
    client goes away.
    """
    stream = await run_in_threadpool(gateway.get_object, settings.s3_bucket_name, object_path)
    filename = object_path.rstrip("/").split("/")[-1]
    headers = {"Content-Disposition": f'attachment; filename="{quote(filename)}"'}
    if stream.content_length is not None:
        headers["Content-Length"] = str(stream.content_length)

    return StreamingResponse(
        iter(stream),
        media_type="application/octet-stream",
        headers=headers,
        background=BackgroundTask(stream.close),
    )
