"""
Chat endpoint.

POST /      (path used by the deployed frontend)
POST /chat
Body: {"intent": str, "location": {"lat": float, "lon": float}?, "message": str}
Returns: {"responseText": str} with the dispatcher's status code.
"""
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from siska.core.logging import get_logger
from siska.models.requests import ChatRequest
from siska.models.responses import ChatResponse
from siska.services.chat.dispatcher import get_dispatcher

logger = get_logger(__name__)

router = APIRouter()


@router.post("/", response_model=ChatResponse)
@router.post("/chat", response_model=ChatResponse)
async def chat(payload: ChatRequest) -> JSONResponse:
    """
    Answer one classified chat request.

    Recoverable provider failures still return 200 with an apology text;
    only an unrecognized intent (400) or an internal failure (500) changes
    the status.
    """
    outcome = await get_dispatcher().dispatch(payload)
    body = ChatResponse(response_text=outcome.response_text)
    return JSONResponse(status_code=outcome.status_code, content=body.model_dump(by_alias=True))
