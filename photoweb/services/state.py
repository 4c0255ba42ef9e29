from fastapi import Request

from photoweb.services.render import ViewRenderer
from photoweb.services.storage import ImageStorage


def get_storage(request: Request) -> ImageStorage:
    return request.app.state.storage


def get_renderer(request: Request) -> ViewRenderer:
    return request.app.state.renderer
