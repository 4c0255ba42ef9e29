from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, Template, TemplateError, select_autoescape
from loguru import logger

from photoweb.errors import RenderError, ViewNotFoundError

VIEW_SUFFIX = ".html"


class ViewRenderer:
    """Renders named views compiled once at startup.

    The view table is read-only for the life of the process and is shared by
    every request.
    """

    def __init__(self, views: Mapping[str, Template]) -> None:
        self._views = MappingProxyType(dict(views))

    @classmethod
    def load(cls, views_dir: Path) -> "ViewRenderer":
        views_dir = Path(views_dir)
        if not views_dir.is_dir():
            raise FileNotFoundError(f"Views directory not found: {views_dir}")

        env = Environment(
            loader=FileSystemLoader(str(views_dir)),
            autoescape=select_autoescape(["html"]),
        )
        views: dict[str, Template] = {}
        for path in sorted(views_dir.iterdir()):
            if path.suffix != VIEW_SUFFIX or not path.is_file():
                continue
            logger.info("Loading template path={}", str(path))
            views[path.stem] = env.get_template(path.name)
        return cls(views)

    @property
    def names(self) -> list[str]:
        return sorted(self._views)

    def render(self, name: str, context: Mapping[str, Any] | None = None) -> HTMLResponse:
        template = self._views.get(name)
        if template is None:
            logger.error("View missing view={} loaded={}", name, self.names)
            raise ViewNotFoundError(f"View not found: {name}")
        try:
            body = template.render(**dict(context or {}))
        except TemplateError as exc:
            logger.error("View render failed view={} error={}", name, str(exc))
            raise RenderError(str(exc)) from exc
        return HTMLResponse(content=body)
