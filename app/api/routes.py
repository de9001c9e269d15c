import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from app.chat import ChatHandler
from app.models import AskRequest, AskResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ---- DEPENDENCIAS ----
def require_requested_with(request: Request):
    """
    Protección simple tipo CSRF: todo POST debe traer X-Requested-With.
    Un formulario de otro sitio no puede agregar ese header, pero esto no
    sustituye a un token anti-CSRF real.
    """
    if request.method == "POST" and not request.headers.get("X-Requested-With"):
        raise HTTPException(status_code=403, detail="Forbidden: Missing required header")


def get_chat_handler(request: Request) -> ChatHandler:
    return request.app.state.chat_handler


# ---- ENDPOINTS ----
@router.post(
    "/ask",
    response_model=AskResponse,
    dependencies=[Depends(require_requested_with)],
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def ask_endpoint(body: AskRequest, handler: ChatHandler = Depends(get_chat_handler)):
    answer = await handler.ask(body.question)
    return {"answer": answer}
