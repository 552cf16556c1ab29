"""Form session orchestration: edits, recomputation and export gating."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from functools import lru_cache, partial
from threading import Lock
from typing import Callable, Optional, Tuple

from datastore.form_store import FormStore
from models import form
from models.form import FormState, IdSequence
from models.records import Number, Payload
from services.builder import build_payload
from services.encoder import encode_payload, export_filename
from services.normalizer import HUMIDITY_MAX, HUMIDITY_MIN, SYSTEM_ID_MIN, normalize, parse_number
from services.self_check import SelfCheckSummary, run_self_checks
from services.validation import is_export_ready, is_form_valid
from settings import get_settings
from storage.downloads import DownloadArtifacts, DownloadLink, build_default_artifacts

logger = logging.getLogger(__name__)

COPY_NOT_READY_MESSAGE = "Complete at least one valid setpoint before copying."
DOWNLOAD_NOT_READY_MESSAGE = "Complete at least one valid setpoint before downloading."


class ExportNotReadyError(Exception):
    """Raised when an export is requested while the form is not export-ready."""


@dataclass(frozen=True)
class FormSnapshot:
    """Everything derived from one form revision."""

    state: FormState
    revision: int
    system_id: Number
    payload: Payload
    valid: bool
    export_ready: bool
    text: str
    filename: str
    download: Optional[DownloadLink]


def resolve_system_id(text: str) -> Number:
    value = parse_number(text)
    return math.nan if value is None else value


def evaluate(state: FormState, revision: int = 0) -> FormSnapshot:
    """Recompute payload, validity and encoded text from ``state``."""
    system_id = resolve_system_id(state.system_id)
    payload = build_payload(system_id, state.groups)
    return FormSnapshot(
        state=state,
        revision=revision,
        system_id=system_id,
        payload=payload,
        valid=is_form_valid(system_id, state.groups),
        export_ready=is_export_ready(system_id, state.groups),
        text=encode_payload(payload, state.compact),
        filename=export_filename(system_id),
        download=None,
    )


class FormSession:
    """Applies edits to the form store and keeps derived outputs current."""

    def __init__(
        self,
        artifacts: DownloadArtifacts,
        default_system_id: str = "1",
        compact: bool = True,
        ids: Optional[IdSequence] = None,
    ) -> None:
        self.ids = ids or IdSequence()
        self.default_system_id = default_system_id
        self.artifacts = artifacts
        self.store = FormStore(form.initial_state(default_system_id, self.ids, compact=compact))
        self.last_self_check: Optional[SelfCheckSummary] = None
        self._lock = Lock()
        self._snapshot = self._recompute(*self.store.get())

    def snapshot(self) -> FormSnapshot:
        with self._lock:
            return self._snapshot

    def set_system_id(self, system_id: str) -> FormSnapshot:
        value = normalize(system_id, minimum=SYSTEM_ID_MIN)
        return self._apply(partial(form.set_system_id, system_id=value))

    def set_compact(self, compact: bool) -> FormSnapshot:
        return self._apply(partial(form.set_compact, compact=compact))

    def add_group(self) -> FormSnapshot:
        return self._apply(partial(form.add_group, ids=self.ids))

    def quick_add(self, preset: str) -> FormSnapshot:
        return self._apply(partial(form.add_preset_group, preset_name=preset, ids=self.ids))

    def remove_group(self, group_id: str) -> FormSnapshot:
        return self._apply(partial(form.remove_group, group_id=group_id), group_id=group_id)

    def set_temperature(self, group_id: str, temperature: str) -> FormSnapshot:
        value = normalize(temperature)
        return self._apply(
            partial(form.set_temperature, group_id=group_id, temperature=value),
            group_id=group_id,
        )

    def add_humidity(self, group_id: str) -> FormSnapshot:
        return self._apply(partial(form.add_humidity, group_id=group_id, ids=self.ids), group_id=group_id)

    def set_humidity(self, group_id: str, humidity_id: str, nominal: str) -> FormSnapshot:
        value = normalize(nominal, minimum=HUMIDITY_MIN, maximum=HUMIDITY_MAX)
        return self._apply(
            partial(form.set_humidity, group_id=group_id, humidity_id=humidity_id, nominal=value),
            group_id=group_id,
            humidity_id=humidity_id,
        )

    def remove_humidity(self, group_id: str, humidity_id: str) -> FormSnapshot:
        return self._apply(
            partial(form.remove_humidity, group_id=group_id, humidity_id=humidity_id),
            group_id=group_id,
            humidity_id=humidity_id,
        )

    def load_sample(self) -> FormSnapshot:
        return self._apply(partial(form.load_sample, ids=self.ids))

    def reset(self) -> FormSnapshot:
        def _reset(state: FormState) -> FormState:
            return form.initial_state(self.default_system_id, self.ids, compact=state.compact)

        return self._apply(_reset)

    def copy_text(self, compact: Optional[bool] = None) -> str:
        """Return the encoded document, optionally re-encoded with ``compact``."""
        snapshot = self.snapshot()
        if not snapshot.export_ready:
            raise ExportNotReadyError(COPY_NOT_READY_MESSAGE)
        if compact is None or compact == snapshot.state.compact:
            return snapshot.text
        return encode_payload(snapshot.payload, compact)

    def download(self) -> Tuple[str, str]:
        """Return the encoded document and its filename."""
        snapshot = self.snapshot()
        if not snapshot.export_ready:
            raise ExportNotReadyError(DOWNLOAD_NOT_READY_MESSAGE)
        return snapshot.text, snapshot.filename

    def run_self_checks(self) -> SelfCheckSummary:
        summary = run_self_checks()
        self.last_self_check = summary
        return summary

    def shutdown(self) -> None:
        """Release the live download artifact."""
        self.artifacts.release()

    def _apply(self, transition: Callable[[FormState], FormState], **context: str) -> FormSnapshot:
        with self._lock:
            state, revision = self.store.update(transition)
            self._snapshot = self._recompute(state, revision)
            logger.debug(
                "Form updated",
                extra={
                    "revision": revision,
                    "setpoint_count": len(self._snapshot.payload),
                    **context,
                },
            )
            return self._snapshot

    def _recompute(self, state: FormState, revision: int) -> FormSnapshot:
        snapshot = evaluate(state, revision)
        link = self.artifacts.refresh(snapshot.text, snapshot.filename, snapshot.export_ready)
        return replace(snapshot, download=link)


@lru_cache
def build_default_session() -> FormSession:
    """Factory that wires the session with configured defaults."""
    settings = get_settings()
    return FormSession(
        artifacts=build_default_artifacts(),
        default_system_id=settings.default_system_id,
        compact=settings.compact_default,
    )
