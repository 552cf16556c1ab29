"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from models.records import Parameter
from services.self_check import SelfCheckStatus, SelfCheckSummary
from services.session import FormSnapshot


class SystemIdUpdate(BaseModel):
    system_id: str = Field(..., description="Raw system id text; normalised with a minimum of 1.")


class CompactUpdate(BaseModel):
    compact: bool


class TemperatureUpdate(BaseModel):
    temperature: str = Field(..., description="Raw temperature text in degrees Celsius.")


class HumidityUpdate(BaseModel):
    nominal: str = Field(..., description="Raw relative humidity text, clamped to [0, 100].")


class HumidityEntrySchema(BaseModel):
    id: str
    nominal: str


class SetpointGroupSchema(BaseModel):
    id: str
    temperature: str
    humidities: List[HumidityEntrySchema] = Field(default_factory=list)


class ReadingSchema(BaseModel):
    """One element of an exported setpoint."""

    system_id: Optional[Union[int, float]]
    parameter: Parameter
    nominal: Union[int, float]


class DownloadLinkSchema(BaseModel):
    kind: str
    href: str
    filename: str


class FormResponse(BaseModel):
    """Current form revision together with everything derived from it."""

    revision: int = Field(..., ge=0)
    system_id: str
    compact: bool
    groups: List[SetpointGroupSchema]
    payload: List[List[ReadingSchema]]
    valid: bool
    export_ready: bool
    json_text: str = Field(..., description="Encoded output document.")
    filename: str
    download: Optional[DownloadLinkSchema] = None

    @classmethod
    def from_snapshot(cls, snapshot: FormSnapshot) -> "FormResponse":
        state = snapshot.state
        link = snapshot.download
        return cls(
            revision=snapshot.revision,
            system_id=state.system_id,
            compact=state.compact,
            groups=[
                SetpointGroupSchema(
                    id=group.id,
                    temperature=group.temperature,
                    humidities=[HumidityEntrySchema(id=entry.id, nominal=entry.nominal) for entry in group.humidities],
                )
                for group in state.groups
            ],
            payload=[[ReadingSchema(**reading.to_dict()) for reading in setpoint] for setpoint in snapshot.payload],
            valid=snapshot.valid,
            export_ready=snapshot.export_ready,
            json_text=snapshot.text,
            filename=snapshot.filename,
            download=(
                DownloadLinkSchema(kind=link.kind, href=link.href, filename=link.filename)
                if link is not None
                else None
            ),
        )


class SelfCheckResponse(BaseModel):
    status: SelfCheckStatus
    passed: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    message: str

    @classmethod
    def from_summary(cls, summary: SelfCheckSummary) -> "SelfCheckResponse":
        return cls(status=summary.status, passed=summary.passed, total=summary.total, message=summary.message)
