"""Agent profile API routes."""

from fastapi import APIRouter

from ...app import Application
from ...models import PROVIDERS
from ..errors import to_http_error
from ..schemas import AgentRequest, AgentResponse, ProviderResponse, StatusResponse


def create_agents_router(app: Application) -> APIRouter:
    """Create agents router."""
    router = APIRouter(prefix="/api", tags=["agents"])

    @router.get("/providers", response_model=list[ProviderResponse])
    async def list_providers() -> list[ProviderResponse]:
        """Providers and what each requires from a profile."""
        return [ProviderResponse.from_spec(p, spec) for p, spec in PROVIDERS.items()]

    @router.get("/agents", response_model=list[AgentResponse])
    async def list_agents() -> list[AgentResponse]:
        return [AgentResponse.from_profile(p) for p in app.agents.list()]

    @router.post("/agents", response_model=AgentResponse)
    async def save_agent(request: AgentRequest) -> AgentResponse:
        """Create or update a profile after syncing its credentials."""
        try:
            existing = app.agents.get(request.id) if request.id else None
            profile = await app.chat.save_agent(request.to_profile(existing))
            return AgentResponse.from_profile(profile)
        except Exception as e:
            raise to_http_error(e)

    @router.delete("/agents/{agent_id}", response_model=StatusResponse)
    async def delete_agent(agent_id: str) -> dict:
        """Delete a profile and its conversation history."""
        try:
            await app.chat.delete_agent(agent_id)
            return {"status": "ok"}
        except Exception as e:
            raise to_http_error(e)

    return router
