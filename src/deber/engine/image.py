# engine/image.py
from __future__ import annotations

import io
from typing import Callable, Optional

from ..errors import IMAGE_BUILD, DeberError


class Images:
    def __init__(self, api):
        self.api = api

    def exists(self, tag: str) -> bool:
        return bool(self.api.images(name=tag, quiet=True))

    def build(
        self,
        tag: str,
        dockerfile: str,
        on_line: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Build `tag` from an in-memory Dockerfile, streaming build output."""
        fileobj = io.BytesIO(dockerfile.encode("utf-8"))
        stream = self.api.build(
            fileobj=fileobj,
            tag=tag,
            rm=True,
            pull=True,
            decode=True,
        )
        for chunk in stream:
            if "error" in chunk:
                raise DeberError(
                    kind=IMAGE_BUILD,
                    message=f"could not build image {tag}",
                    details={"error": chunk["error"].strip()},
                )
            line = chunk.get("stream")
            if line and on_line is not None:
                on_line(line)
