"""Gateway control API routes."""

from fastapi import APIRouter

from ...app import Application
from ..errors import to_http_error
from ..schemas import GatewayResponse


def create_gateway_router(app: Application) -> APIRouter:
    """Create gateway router."""
    router = APIRouter(prefix="/api/gateway", tags=["gateway"])

    @router.get("", response_model=GatewayResponse)
    async def gateway_status() -> GatewayResponse:
        return GatewayResponse.from_state(app.gateway.state)

    @router.post("/start", response_model=GatewayResponse)
    async def start_gateway() -> GatewayResponse:
        """Start the gateway; failures are reported in the returned state."""
        return GatewayResponse.from_state(await app.gateway.start())

    @router.post("/stop", response_model=GatewayResponse)
    async def stop_gateway() -> GatewayResponse:
        try:
            return GatewayResponse.from_state(await app.gateway.stop())
        except Exception as e:
            raise to_http_error(e)

    return router
