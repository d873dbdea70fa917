"""Write composed documents and static assets into the destination directory.

The destination is regenerated on every build: :meth:`OutputWriter.prepare`
removes whatever a previous build left behind and recreates the empty root,
so renamed or deleted pages never leave stale files. A failed build leaves
the destination in an unspecified state until the next successful build.
"""

from __future__ import annotations

import logging
import shutil
import threading
import typing as typ
from pathlib import Path, PurePosixPath

from quire.errors import SiteIOError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from quire.generator.models import RenderedDocument

logger = logging.getLogger(__name__)


class OutputWriter:
    """Write build artifacts beneath ``destination``.

    Parameters
    ----------
    destination : Path
        Output root. Everything beneath it is owned by the writer and is
        removed by :meth:`prepare`.

    Examples
    --------
    >>> writer = OutputWriter(Path("public"))  # doctest: +SKIP
    >>> writer.prepare()  # doctest: +SKIP
    >>> writer.write_text(PurePosixPath("css/site.css"), "body {}")  # doctest: +SKIP
    PosixPath('public/css/site.css')
    """

    def __init__(self, destination: Path) -> None:
        self.destination = destination
        self._mkdir_lock = threading.Lock()

    def prepare(self) -> None:
        """Remove any previous output and recreate an empty destination.

        Raises
        ------
        SiteIOError
            If the old output cannot be removed or the root cannot be created.
        """
        try:
            if self.destination.is_dir() and not self.destination.is_symlink():
                shutil.rmtree(self.destination)
            elif self.destination.exists() or self.destination.is_symlink():
                self.destination.unlink()
            self.destination.mkdir(parents=True)
        except OSError as exc:
            msg = f"cannot recreate output directory: {exc.strerror or exc}"
            raise SiteIOError(msg, path=self.destination, stage="output") from exc
        logger.debug("cleared output directory %s", self.destination)

    def write_document(self, document: RenderedDocument) -> Path:
        """Write ``document`` to its output path and return the written file."""
        return self.write_text(document.output_path, document.html)

    def write_documents(
        self, documents: cabc.Iterable[RenderedDocument]
    ) -> list[Path]:
        """Write every document in order and return the written files."""
        return [self.write_document(document) for document in documents]

    def write_text(self, relative: PurePosixPath, text: str) -> Path:
        """Write ``text`` as UTF-8 to ``relative`` beneath the destination.

        Raises
        ------
        SiteIOError
            If the file or one of its parent directories cannot be written.
        """
        target = self._target(relative)
        try:
            self._ensure_parent(target)
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            msg = f"cannot write output file: {exc.strerror or exc}"
            raise SiteIOError(msg, path=target, stage="output") from exc
        logger.debug("wrote %s", relative)
        return target

    def copy_file(self, source: Path, relative: PurePosixPath) -> Path:
        """Copy ``source`` verbatim to ``relative`` beneath the destination.

        Raises
        ------
        SiteIOError
            If the source cannot be read or the copy cannot be written.
        """
        target = self._target(relative)
        try:
            self._ensure_parent(target)
            shutil.copyfile(source, target)
        except OSError as exc:
            msg = f"cannot copy '{source}': {exc.strerror or exc}"
            raise SiteIOError(msg, path=target, stage="output") from exc
        logger.debug("copied %s", relative)
        return target

    def copy_tree(self, source_root: Path) -> list[Path]:
        """Copy every visible file under ``source_root`` into the destination.

        Files already written by an earlier call are overwritten, so later
        trees take precedence over earlier ones.
        """
        if not source_root.is_dir():
            return []
        copied: list[Path] = []
        for path in sorted(source_root.rglob("*")):
            relative = path.relative_to(source_root)
            if not path.is_file() or any(
                part.startswith(".") for part in relative.parts
            ):
                continue
            copied.append(self.copy_file(path, PurePosixPath(relative.as_posix())))
        return copied

    def _target(self, relative: PurePosixPath) -> Path:
        if relative.is_absolute() or ".." in relative.parts:
            msg = f"output path escapes the destination: {relative}"
            raise SiteIOError(msg, path=relative, stage="output")
        return self.destination.joinpath(*relative.parts)

    def _ensure_parent(self, target: Path) -> None:
        with self._mkdir_lock:
            target.parent.mkdir(parents=True, exist_ok=True)


__all__ = ["OutputWriter"]
