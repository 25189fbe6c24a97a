"""
Static file serving for uploads.
Only files that still have a gallery or order record behind them are served.
"""
from typing import Callable

from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.types import Scope


class UploadStaticFiles(StaticFiles):
    """
    StaticFiles that asks is_served(filename) before serving.

    Deleting an image's metadata makes its URL 404 at once, even if the file
    itself could not be removed from disk.
    """

    def __init__(self, *args, is_served: Callable[[str], bool], **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.is_served = is_served

    async def get_response(self, path: str, scope: Scope):
        if not self.is_served(path):
            raise HTTPException(status_code=404)

        response = await super().get_response(path, scope)
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
        response.headers.setdefault("Cache-Control", "public, max-age=31536000")
        return response
