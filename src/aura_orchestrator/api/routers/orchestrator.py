"""
aura_orchestrator.api.routers.orchestrator

Public orchestration endpoints.

Responsibilities:
- Single-modal processing (`POST /process`) and multi-modal uploads (`POST /multimodal`).
- Capability and status introspection.
- A canned smoke request (`POST /test`) for operators.

Aborts raise `OrchestrationError`; the app-level handler renders them as a single
error descriptor.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, Field

from aura_orchestrator.api.deps import orchestration_service, settings_dep
from aura_orchestrator.auth.deps import optional_principal
from aura_orchestrator.auth.models import Principal
from aura_orchestrator.observability.logging import get_logger
from aura_orchestrator.orchestrator.catalog import Capabilities
from aura_orchestrator.orchestrator.errors import InvalidRequestError
from aura_orchestrator.orchestrator.models import OrchestrationOutcome
from aura_orchestrator.services.orchestration_service import OrchestrationService
from aura_orchestrator.settings import Settings

router = APIRouter(prefix="/v1/orchestrator", tags=["orchestrator"])
log = get_logger(__name__)

TEST_MESSAGE = "What are some healthy breakfast options for someone trying to lose weight?"


class ProcessRequest(BaseModel):
    message: str = Field(min_length=1, max_length=20_000)
    context: dict[str, Any] = Field(default_factory=dict)


class OutcomeResponse(BaseModel):
    status: str = "success"
    message: str
    data: OrchestrationOutcome


class CapabilitiesResponse(BaseModel):
    status: str = "success"
    data: Capabilities


class StatusResponse(BaseModel):
    status: str = "success"
    data: dict[str, Any]


@router.post("/process", response_model=OutcomeResponse)
async def process(
    body: ProcessRequest,
    principal: Principal = Depends(optional_principal),
    svc: OrchestrationService = Depends(orchestration_service),
) -> OutcomeResponse:
    outcome = await svc.process_request(body.message, principal.subject, body.context)
    return OutcomeResponse(message="Complex request processed successfully", data=outcome)


@router.post("/multimodal", response_model=OutcomeResponse)
async def multimodal(
    text: str | None = Form(default=None),
    files: list[UploadFile] | None = File(default=None),
    principal: Principal = Depends(optional_principal),
    settings: Settings = Depends(settings_dep),
    svc: OrchestrationService = Depends(orchestration_service),
) -> OutcomeResponse:
    uploads = files or []
    if len(uploads) > settings.max_files:
        raise InvalidRequestError(
            "Too many files", detail=f"at most {settings.max_files} files per request"
        )

    image: bytes | None = None
    image_mime: str | None = None
    audio: bytes | None = None
    audio_mime: str | None = None
    for upload in uploads:
        content_type = (upload.content_type or "").lower()
        if not content_type.startswith(("image/", "audio/")):
            raise InvalidRequestError(
                "Unsupported file type", detail=f"{upload.filename}: {content_type or 'unknown'}"
            )
        payload = await upload.read()
        if len(payload) > settings.max_file_size:
            raise InvalidRequestError(
                "File too large", detail=f"{upload.filename}: {len(payload)} bytes"
            )
        # One image and one audio clip per pass; a later file of the same kind wins.
        if content_type.startswith("image/"):
            image, image_mime = payload, content_type
        else:
            audio, audio_mime = payload, content_type

    log.info(
        "multimodal_received",
        files=len(uploads),
        has_text=bool(text and text.strip()),
        has_image=image is not None,
        has_audio=audio is not None,
    )
    outcome = await svc.process_multimodal(
        user_id=principal.subject,
        text=text,
        image=image,
        image_mime=image_mime,
        audio=audio,
        audio_mime=audio_mime,
    )
    return OutcomeResponse(message="Multimodal input processed successfully", data=outcome)


@router.get("/capabilities", response_model=CapabilitiesResponse)
async def capabilities(
    svc: OrchestrationService = Depends(orchestration_service),
) -> CapabilitiesResponse:
    return CapabilitiesResponse(data=svc.get_capabilities())


@router.get("/status", response_model=StatusResponse)
async def status(
    svc: OrchestrationService = Depends(orchestration_service),
) -> StatusResponse:
    return StatusResponse(data=svc.status())


@router.post("/test", response_model=OutcomeResponse)
async def smoke_test(
    principal: Principal = Depends(optional_principal),
    svc: OrchestrationService = Depends(orchestration_service),
) -> OutcomeResponse:
    outcome = await svc.process_request(TEST_MESSAGE, principal.subject, {"test": True})
    return OutcomeResponse(message="Orchestrator test completed successfully", data=outcome)
