"""Request-scoped failures raised by handlers and adapters.

Each error carries the HTTP status it maps to. The application converts any
``PhotowebError`` into a plain-text response with that status and the error
text; anything else escaping a handler is handled by the request barrier in
``photoweb.main``.
"""


class PhotowebError(Exception):
    status_code = 500


class InvalidImageIdError(PhotowebError):
    status_code = 400


class ImageNotFoundError(PhotowebError):
    status_code = 404


class UploadError(PhotowebError):
    pass


class StorageWriteError(PhotowebError):
    pass


class StorageReadError(PhotowebError):
    pass


class ViewNotFoundError(PhotowebError):
    pass


class RenderError(PhotowebError):
    pass
