"""HTTP endpoints for the cloud drive.

Each view is a thin wrapper: parse the request, call FileStore, turn the
result (or a FileStoreError) into a response.
"""

import functools
import json
import logging
import re
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, Final

from django.http import (
    FileResponse,
    HttpRequest,
    HttpResponse,
    JsonResponse,
    StreamingHttpResponse,
)
from django.utils.http import content_disposition_header
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from server.apps.files.exceptions import (
    EntryExistsError,
    EntryNotFoundError,
    FileStoreError,
    InvalidPathError,
    OperationFailedError,
    QuotaExceededError,
)
from server.apps.files.infrastructure.metadata import detect_mime_type
from server.apps.files.logic.file_operations import FileStore
from server.apps.files.logic.quota_operations import get_storage_status

logger = logging.getLogger(__name__)

_HTTP_INSUFFICIENT_STORAGE: Final = 507

_ERROR_STATUS: Final[dict[type[FileStoreError], int]] = {
    InvalidPathError: 400,
    EntryNotFoundError: 404,
    EntryExistsError: 409,
    QuotaExceededError: _HTTP_INSUFFICIENT_STORAGE,
    OperationFailedError: 500,
}

_RANGE_PATTERN: Final = re.compile(r'^bytes=(\d+)-(\d*)$')
_CHUNK_SIZE: Final = 1024 * 1024  # 1MB range chunks

_View = Callable[..., HttpResponse]


def _error(message: str, status: int) -> JsonResponse:
    return JsonResponse({'error': message}, status=status)


def _handle_store_errors(view: _View) -> _View:
    """Translate FileStoreError into a JSON error response.

    Args:
        view: View function to wrap.

    Returns:
        Wrapped view.
    """
    @functools.wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:  # noqa: WPS430
        try:
            return view(request, *args, **kwargs)
        except FileStoreError as error:
            status = _ERROR_STATUS.get(type(error), 500)
            logger.warning(
                '%s %s failed with %d: %s',
                request.method,
                request.path,
                status,
                error,
            )
            return _error(str(error), status)
    return wrapper


def _read_json(request: HttpRequest) -> dict[str, Any]:
    """Parse JSON request body.

    Args:
        request: Incoming request.

    Returns:
        Decoded JSON object.

    Raises:
        InvalidPathError: If body is not a JSON object.
    """
    try:
        payload = json.loads(request.body or b'{}')
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise InvalidPathError('Malformed JSON body') from error
    if not isinstance(payload, dict):
        raise InvalidPathError('JSON body must be an object')
    return payload


@require_http_methods(['GET'])
@_handle_store_errors
def list_entries(request: HttpRequest) -> HttpResponse:
    """List direct children of ``?path=``."""
    store = FileStore.from_settings()
    entries = store.list_directory(request.GET.get('path', ''))
    return JsonResponse([entry.to_json() for entry in entries], safe=False)


@csrf_exempt
@require_http_methods(['POST'])
@_handle_store_errors
def upload(request: HttpRequest) -> HttpResponse:
    """Store every file sent in the multipart ``files`` field."""
    uploads = request.FILES.getlist('files')
    if not uploads:
        return _error('No files uploaded', 400)

    store = FileStore.from_settings()
    stored_names = store.store_files(request.POST.get('path', ''), uploads)
    return JsonResponse({
        'message': 'Files uploaded successfully',
        'files': stored_names,
    })


@require_http_methods(['GET', 'HEAD'])
@_handle_store_errors
def download(request: HttpRequest, filename: str) -> HttpResponse:
    """Send a file, or a zip stream when the target is a folder."""
    store = FileStore.from_settings()
    rel_path = request.GET.get('path', '')
    target = store.locate(rel_path, filename)

    if target.is_dir():
        response = StreamingHttpResponse(
            store.archive_directory(rel_path, filename),
            content_type='application/zip',
        )
        response['Content-Disposition'] = content_disposition_header(
            as_attachment=True,
            filename=f'{target.name}.zip',
        )
        return response

    return _send_file(request, target)


def _send_file(request: HttpRequest, path: Path) -> HttpResponse:
    """Send file content, honouring a single ``Range: bytes=`` header.

    Args:
        request: Incoming request.
        path: File to send.

    Returns:
        200 with the full file, 206 with the requested slice, or 416.
    """
    size = path.stat().st_size
    content_type = detect_mime_type(path.name)
    match = _RANGE_PATTERN.match(request.headers.get('Range', ''))

    if match is None:
        response = FileResponse(
            path.open('rb'),
            as_attachment=True,
            filename=path.name,
            content_type=content_type,
        )
        response['Accept-Ranges'] = 'bytes'
        return response

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else size - 1
    end = min(end, size - 1)
    if start >= size or start > end:
        response = HttpResponse(status=416)
        response['Content-Range'] = f'bytes */{size}'
        return response

    length = end - start + 1
    response = StreamingHttpResponse(
        _read_range(path, start, length),
        status=206,
        content_type=content_type,
    )
    response['Content-Range'] = f'bytes {start}-{end}/{size}'
    response['Content-Length'] = str(length)
    response['Accept-Ranges'] = 'bytes'
    return response


def _read_range(path: Path, start: int, length: int) -> Iterator[bytes]:
    with path.open('rb') as file_obj:
        file_obj.seek(start)
        remaining = length
        while remaining > 0:
            chunk = file_obj.read(min(_CHUNK_SIZE, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


@require_http_methods(['GET'])
def storage_status(request: HttpRequest) -> HttpResponse:
    """Report used/total storage and percentage of quota."""
    try:
        status = get_storage_status(FileStore.from_settings())
    except (OSError, FileStoreError):
        logger.exception('Error calculating storage')
        return _error('Failed to calculate storage.', 500)
    return JsonResponse(status.to_json())


@csrf_exempt
@require_http_methods(['DELETE'])
@_handle_store_errors
def delete(request: HttpRequest, filename: str) -> HttpResponse:
    """Delete one file from ``?path=`` (root by default)."""
    store = FileStore.from_settings()
    store.delete_file(request.GET.get('path', ''), filename)
    return JsonResponse({'message': 'File deleted successfully'})


@csrf_exempt
@require_http_methods(['POST'])
@_handle_store_errors
def make_directory(request: HttpRequest) -> HttpResponse:
    """Create a folder from JSON ``{path, name}``."""
    payload = _read_json(request)
    store = FileStore.from_settings()
    store.make_directory(
        str(payload.get('path') or ''),
        str(payload.get('name') or ''),
    )
    return JsonResponse({'message': 'Folder created'})


@csrf_exempt
@require_http_methods(['POST'])
@_handle_store_errors
def rename(request: HttpRequest) -> HttpResponse:
    """Rename an entry from JSON ``{path, oldName, newName}``."""
    payload = _read_json(request)
    store = FileStore.from_settings()
    store.rename_entry(
        str(payload.get('path') or ''),
        str(payload.get('oldName') or ''),
        str(payload.get('newName') or ''),
    )
    return JsonResponse({'message': 'Renamed'})
