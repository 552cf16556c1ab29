"""JSON encoding of built payloads and export naming."""

from __future__ import annotations

import json
import logging
from urllib.parse import quote

from models.records import Number, Payload, payload_to_data
from services.normalizer import format_number

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT = "[]"
INDENT = 2
MEDIA_TYPE = "application/json"


def encode_payload(payload: Payload, compact: bool) -> str:
    """Serialise ``payload``; any failure yields ``"[]"``."""
    try:
        data = payload_to_data(payload)
        if compact:
            return json.dumps(data, separators=(",", ":"), allow_nan=False)
        return json.dumps(data, indent=INDENT, allow_nan=False)
    except (TypeError, ValueError, AttributeError) as exc:
        logger.warning("Payload serialisation failed: %s", exc)
        return EMPTY_DOCUMENT


def export_filename(system_id: Number) -> str:
    return f"calibration_setpoints_system_{format_number(system_id)}.json"


def data_uri(text: str) -> str:
    return f"data:{MEDIA_TYPE};charset=utf-8,{quote(text, safe='')}"
