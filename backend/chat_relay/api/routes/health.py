"""Health check endpoints."""

from fastapi import APIRouter, Depends

from chat_relay.api.deps import get_app_settings, get_credential_gate
from chat_relay.core.config import Settings
from chat_relay.schemas.chat import HealthResponse
from chat_relay.services.credentials import CredentialGate

router = APIRouter()


@router.get("/health", tags=["system"], response_model=HealthResponse)
def healthcheck(
    settings: Settings = Depends(get_app_settings),
    gate: CredentialGate = Depends(get_credential_gate),
) -> HealthResponse:
    """Readiness probe; reports whether the API key was already verified."""

    return HealthResponse(status="ok", model=settings.chat_model, credentials_verified=gate.verified)
