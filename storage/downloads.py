"""Download artifacts exposing the encoded payload to the browser.

Strategies are tried in order: a temp file served under ``/downloads`` first,
then a ``data:`` URI. The current artifact is released whenever it is
superseded, so at most one temp file exists per artifact manager.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Optional, Protocol, Sequence
from uuid import uuid4

from services.encoder import data_uri
from settings import get_settings

logger = logging.getLogger(__name__)

DOWNLOAD_ROUTE_PREFIX = "/downloads"


@dataclass(frozen=True)
class DownloadLink:
    kind: str
    href: str
    filename: str
    path: Optional[Path] = None


class DownloadStrategy(Protocol):
    name: str

    def prepare(self, text: str, filename: str) -> DownloadLink:
        ...

    def release(self, link: DownloadLink) -> None:
        ...


class TempFileStrategy:
    name = "file"

    def __init__(self, root_path: Path) -> None:
        self.root_path = root_path

    def prepare(self, text: str, filename: str) -> DownloadLink:
        self.root_path.mkdir(parents=True, exist_ok=True)
        artifact_name = f"{uuid4().hex}.json"
        path = self.root_path / artifact_name
        path.write_text(text, encoding="utf-8")
        return DownloadLink(
            kind=self.name,
            href=f"{DOWNLOAD_ROUTE_PREFIX}/{artifact_name}",
            filename=filename,
            path=path,
        )

    def release(self, link: DownloadLink) -> None:
        if link.path is not None:
            link.path.unlink(missing_ok=True)


class DataUriStrategy:
    name = "data"

    def prepare(self, text: str, filename: str) -> DownloadLink:
        return DownloadLink(kind=self.name, href=data_uri(text), filename=filename)

    def release(self, link: DownloadLink) -> None:
        return None


class DownloadArtifacts:
    """Owns the single live download artifact for the current form revision."""

    def __init__(self, strategies: Sequence[DownloadStrategy]) -> None:
        self._strategies = tuple(strategies)
        self._current: Optional[DownloadLink] = None
        self._lock = Lock()

    @property
    def current(self) -> Optional[DownloadLink]:
        with self._lock:
            return self._current

    def refresh(self, text: str, filename: str, ready: bool) -> Optional[DownloadLink]:
        """Release the previous artifact and prepare a new one when ``ready``."""
        with self._lock:
            self._release_locked()
            if not ready:
                return None
            for strategy in self._strategies:
                try:
                    link = strategy.prepare(text, filename)
                except (OSError, ValueError) as exc:
                    logger.warning(
                        "Download strategy failed: %s",
                        exc,
                        extra={"strategy": strategy.name, "export_file": filename},
                    )
                    continue
                self._current = link
                logger.debug(
                    "Prepared download artifact",
                    extra={"strategy": strategy.name, "export_file": filename},
                )
                return link
            logger.error("No download strategy succeeded", extra={"export_file": filename})
            return None

    def resolve(self, artifact_name: str) -> Optional[DownloadLink]:
        """Return the live file artifact named ``artifact_name``, if any."""
        with self._lock:
            link = self._current
            if link is None or link.path is None or link.path.name != artifact_name:
                return None
            return link

    def release(self) -> None:
        with self._lock:
            self._release_locked()

    def _release_locked(self) -> None:
        link = self._current
        self._current = None
        if link is None:
            return
        for strategy in self._strategies:
            if strategy.name != link.kind:
                continue
            try:
                strategy.release(link)
            except OSError as exc:
                logger.warning("Failed to release download artifact: %s", exc, extra={"strategy": link.kind})
            return


def build_strategies(root_path: Optional[Path]) -> list[DownloadStrategy]:
    strategies: list[DownloadStrategy] = []
    if root_path is not None:
        strategies.append(TempFileStrategy(root_path))
    strategies.append(DataUriStrategy())
    return strategies


@lru_cache
def build_default_artifacts(root_path: Optional[str] = None) -> DownloadArtifacts:
    settings = get_settings()
    download_root = settings.download_root_path if root_path is None else root_path
    path = Path(download_root) if download_root else None
    return DownloadArtifacts(build_strategies(path))
