from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from photoweb.errors import UploadError
from photoweb.services.render import ViewRenderer
from photoweb.services.state import get_renderer, get_storage
from photoweb.services.storage import ImageStorage, validate_image_id

router = APIRouter(prefix="/upload", tags=["upload"])

UPLOAD_FIELD = "image"


@router.get("", response_class=HTMLResponse)
async def upload_form(renderer: ViewRenderer = Depends(get_renderer)) -> HTMLResponse:
    return renderer.render("upload")


@router.post("", response_class=RedirectResponse, status_code=302)
async def upload_image(
    request: Request,
    storage: ImageStorage = Depends(get_storage),
) -> RedirectResponse:
    # The form is read by hand so a missing or non-file field is an UploadError, not a 422.
    async with request.form() as form:
        image = form.get(UPLOAD_FIELD)
        if image is None:
            logger.warning("Upload rejected: multipart field missing field={}", UPLOAD_FIELD)
            raise UploadError(f"no such file: multipart field {UPLOAD_FIELD!r} is missing")
        if not isinstance(image, UploadFile):
            logger.warning("Upload rejected: field is not a file field={}", UPLOAD_FIELD)
            raise UploadError(f"no such file: multipart field {UPLOAD_FIELD!r} is not a file")
        if not image.filename:
            logger.warning("Upload rejected: file has no filename field={}", UPLOAD_FIELD)
            raise UploadError(f"multipart field {UPLOAD_FIELD!r} has no filename")

        image_id = validate_image_id(image.filename)
        saved = await run_in_threadpool(storage.save, image_id, image.file)
        content_type = image.content_type

    logger.info(
        "Upload stored image_id={} content_type={} size_bytes={}",
        saved.id,
        content_type,
        saved.size_bytes,
    )
    return RedirectResponse(url=f"/view?{urlencode({'id': saved.id})}", status_code=302)
