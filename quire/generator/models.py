"""Shared dataclasses produced by the page generation pipeline."""

from __future__ import annotations

import dataclasses as dc
from pathlib import PurePosixPath  # noqa: TC003 - used for runtime type metadata


@dc.dataclass(frozen=True, slots=True)
class RenderedDocument:
    """A finished HTML document ready for the output writer.

    Attributes
    ----------
    output_path : PurePosixPath
        Destination path relative to the output root.
    html : str
        Complete HTML document.
    identifier : str | None
        Identifier of the page the document was built from; ``None`` for
        generated documents such as the site index.
    """

    output_path: PurePosixPath
    html: str
    identifier: str | None = None


__all__ = ["RenderedDocument"]
