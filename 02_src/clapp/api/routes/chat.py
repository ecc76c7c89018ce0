"""Chat API routes."""

from fastapi import APIRouter

from ...app import Application
from ...errors import UnknownAgentError
from ..errors import to_http_error
from ..schemas import ChatRequest, MessageResponse, OnboardingState, StatusResponse


def create_chat_router(app: Application) -> APIRouter:
    """Create chat router."""
    router = APIRouter(prefix="/api", tags=["chat"])

    @router.post("/chat/{agent_id}", response_model=MessageResponse)
    async def send_message(agent_id: str, request: ChatRequest) -> MessageResponse:
        """Send a message to an agent and return its reply."""
        try:
            reply = await app.chat.send(agent_id, request.text)
            return MessageResponse.from_message(reply)
        except Exception as e:
            raise to_http_error(e)

    @router.get("/chat/{agent_id}/history", response_model=list[MessageResponse])
    async def get_history(agent_id: str) -> list[MessageResponse]:
        try:
            if app.agents.get(agent_id) is None:
                raise UnknownAgentError(agent_id)
            messages = await app.chat.conversation(agent_id)
            return [MessageResponse.from_message(m) for m in messages]
        except Exception as e:
            raise to_http_error(e)

    @router.delete("/chat/{agent_id}/history", response_model=StatusResponse)
    async def clear_history(agent_id: str) -> dict:
        try:
            await app.chat.clear(agent_id)
            return {"status": "ok"}
        except Exception as e:
            raise to_http_error(e)

    @router.get("/onboarding", response_model=OnboardingState)
    async def get_onboarding() -> OnboardingState:
        return OnboardingState(completed=await app.is_onboarded())

    @router.post("/onboarding", response_model=OnboardingState)
    async def set_onboarding(state: OnboardingState) -> OnboardingState:
        await app.set_onboarded(state.completed)
        return state

    return router
