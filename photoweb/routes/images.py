from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse, HTMLResponse
from loguru import logger
from starlette.concurrency import run_in_threadpool

from photoweb.errors import InvalidImageIdError
from photoweb.services.render import ViewRenderer
from photoweb.services.state import get_renderer, get_storage
from photoweb.services.storage import ImageStorage

router = APIRouter(tags=["images"])

# Stored files are served as-is; the content type is not sniffed.
IMAGE_MEDIA_TYPE = "image"


@router.get("/view", response_class=FileResponse)
async def view_image(
    image_id: str | None = Query(default=None, alias="id"),
    storage: ImageStorage = Depends(get_storage),
) -> FileResponse:
    if image_id is None:
        raise InvalidImageIdError("missing query parameter: id")
    path = await run_in_threadpool(storage.open_path, image_id)
    logger.debug("Serving image image_id={} path={}", image_id, str(path))
    return FileResponse(path, media_type=IMAGE_MEDIA_TYPE)


@router.get("/list", response_class=HTMLResponse)
async def list_images(
    storage: ImageStorage = Depends(get_storage),
    renderer: ViewRenderer = Depends(get_renderer),
) -> HTMLResponse:
    images = await run_in_threadpool(storage.list_ids)
    logger.info("Listing images count={}", len(images))
    return renderer.render("list", {"images": images})
