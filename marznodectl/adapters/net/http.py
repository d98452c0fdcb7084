"""
HTTP adapter: fetch API responses and download files.

Uses ``urllib.request``; downloads stream to a temporary file beside
the target and are renamed into place once complete.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
import urllib.error
import urllib.request
from pathlib import Path

from marznodectl import __version__
from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.core.models.action import Receipt

logger = logging.getLogger(__name__)

_USER_AGENT = f"marznodectl/{__version__}"
_CHUNK = 64 * 1024


class HttpAdapter(Adapter):
    """HTTP GET operations.

    Action params:
        operation (str): 'fetch' (body returned as output) or 'download'.
        url (str): Source URL.
        dest (str): Target file path (for 'download').
        mode (int): File mode applied after download (optional).
        headers (dict[str, str]): Extra request headers.
        timeout (int): Timeout in seconds (default: 30 fetch / 300 download).
    """

    @property
    def name(self) -> str:
        return "http"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if operation not in ("fetch", "download"):
            return False, f"Unknown operation '{operation}'. Valid: download, fetch"
        if not params.get("url"):
            return False, "Missing required param: 'url'"
        if operation == "download" and not params.get("dest"):
            return False, "Missing required param: 'dest' for download"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        headers = {"User-Agent": _USER_AGENT, **params.get("headers", {})}
        request = urllib.request.Request(params["url"], headers=headers)
        start = time.monotonic()

        try:
            if params["operation"] == "fetch":
                with urllib.request.urlopen(request, timeout=params.get("timeout", 30)) as resp:
                    body = resp.read().decode("utf-8")
                return Receipt.success(
                    adapter=self.name,
                    action_id=context.action.id,
                    output=body,
                    duration_ms=int((time.monotonic() - start) * 1000),
                    metadata={"url": params["url"]},
                )

            size = self._download(request, Path(params["dest"]), params)
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=params["dest"],
                duration_ms=int((time.monotonic() - start) * 1000),
                metadata={"url": params["url"], "size_bytes": size},
            )
        except urllib.error.HTTPError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"HTTP {e.code} for {params['url']}",
                metadata={"url": params["url"], "status": e.code},
            )
        except (urllib.error.URLError, OSError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Download error for {params['url']}: {e}",
                metadata={"url": params["url"]},
            )

    def _download(self, request: urllib.request.Request, dest: Path, params: dict) -> int:
        """Stream ``request`` into ``dest``. Returns the byte count."""
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".part")
        tmp = Path(tmp_name)
        size = 0
        try:
            with os.fdopen(fd, "wb") as out, urllib.request.urlopen(
                request, timeout=params.get("timeout", 300)
            ) as resp:
                shutil.copyfileobj(resp, out, _CHUNK)
                size = out.tell()
            if params.get("mode") is not None:
                tmp.chmod(params["mode"])
            tmp.replace(dest)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("Downloaded %s → %s (%d bytes)", request.full_url, dest, size)
        return size
