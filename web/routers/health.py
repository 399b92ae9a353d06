"""Health check endpoints."""

from fastapi import APIRouter, Depends

from octomatiz import __version__
from octomatiz.storage import StorageGate
from web.deps import get_gate

router = APIRouter()


@router.get("/health")
def health(gate: StorageGate = Depends(get_gate)) -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Health status with version and storage availability.
    """
    return {
        "status": "ok",
        "version": __version__,
        "storage": "available" if gate.available() else "unavailable",
    }


@router.get("/")
def root() -> dict[str, str]:
    """Root endpoint.

    Returns:
        API name and version.
    """
    return {"name": "OCTOmatiz API", "version": __version__}
