"""
Batched RPC endpoint.

All chat procedures are reachable through POST /api/rpc. The body is a
single call or a list of calls; each call gets a result or a structured
error ({code, message, details}) in the response.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from chatapp.api.deps import ChatServiceDep, OptionalUser
from chatapp.core.config import get_settings
from chatapp.core.exceptions import (
    AuthenticationError,
    ChatAppError,
    DependencyFailureError,
    ForbiddenError,
    NotFoundError,
    UnknownProcedureError,
    ValidationError,
)
from chatapp.core.logger import logger
from chatapp.interfaces.auth_provider import User
from chatapp.models.chat_session import (
    CreateSessionInput,
    PromptInput,
    RenameSessionInput,
    SessionRef,
)
from chatapp.models.rpc import RpcCall, RpcErrorBody, RpcResponse
from chatapp.services.chat_service import ChatService

router = APIRouter()

Handler = Callable[[ChatService, str, Any], Awaitable[Any]]


@dataclass(frozen=True)
class Procedure:
    name: str
    handler: Handler
    input_model: Optional[type[BaseModel]] = None


PROCEDURES: dict[str, Procedure] = {
    p.name: p
    for p in (
        Procedure(
            "chat.listSessions",
            lambda svc, user_id, _: svc.list_sessions(user_id),
        ),
        Procedure(
            "chat.createSession",
            lambda svc, user_id, data: svc.create_session(user_id, data.title),
            CreateSessionInput,
        ),
        Procedure(
            "chat.renameSession",
            lambda svc, user_id, data: svc.rename_session(user_id, data.session_id, data.new_title),
            RenameSessionInput,
        ),
        Procedure(
            "chat.deleteSession",
            lambda svc, user_id, data: svc.delete_session(user_id, data.session_id),
            SessionRef,
        ),
        Procedure(
            "chat.listMessages",
            lambda svc, user_id, data: svc.list_messages(user_id, data.session_id),
            SessionRef,
        ),
        Procedure(
            "chat.sendTextMessage",
            lambda svc, user_id, data: svc.send_text_message(user_id, data.session_id, data.prompt),
            PromptInput,
        ),
        Procedure(
            "chat.generateImage",
            lambda svc, user_id, data: svc.generate_image(user_id, data.session_id, data.prompt),
            PromptInput,
        ),
    )
}

_STATUS_BY_CODE = {
    AuthenticationError.code: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError.code: status.HTTP_403_FORBIDDEN,
    NotFoundError.code: status.HTTP_404_NOT_FOUND,
    ValidationError.code: status.HTTP_400_BAD_REQUEST,
    UnknownProcedureError.code: status.HTTP_404_NOT_FOUND,
    DependencyFailureError.code: status.HTTP_502_BAD_GATEWAY,
}


def _validation_details(exc: PydanticValidationError) -> list[dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


def _parse_input(procedure: Procedure, raw_input: Optional[dict[str, Any]]) -> Any:
    if procedure.input_model is None:
        if raw_input:
            raise ValidationError(f"{procedure.name} takes no input")
        return None
    try:
        return procedure.input_model.model_validate(raw_input or {})
    except PydanticValidationError as exc:
        raise ValidationError("Invalid input", details=_validation_details(exc)) from exc


def _error_response(call_id: Any, error: ChatAppError) -> RpcResponse:
    return RpcResponse(
        id=call_id,
        error=RpcErrorBody(code=error.code, message=error.message, details=error.details),
    )


async def dispatch(raw_call: Any, service: ChatService, user: Optional[User]) -> RpcResponse:
    """Authenticate, validate and run one call. Never raises."""
    call_id = raw_call.get("id") if isinstance(raw_call, dict) else None
    if not isinstance(call_id, (int, str)):
        # Echo back only ids the envelope can carry
        call_id = None
    try:
        if user is None:
            raise AuthenticationError("User not authenticated.")

        try:
            call = RpcCall.model_validate(raw_call)
        except PydanticValidationError as exc:
            raise ValidationError("Malformed procedure call", details=_validation_details(exc)) from exc

        procedure = PROCEDURES.get(call.method)
        if procedure is None:
            raise UnknownProcedureError(f"Unknown procedure: {call.method}")

        data = _parse_input(procedure, call.input)
        logger.info(f"RPC {call.method} user={user.id}")
        result = await procedure.handler(service, user.id, data)
        return RpcResponse(id=call.id, result=jsonable_encoder(result, by_alias=True))

    except ChatAppError as e:
        if not isinstance(e, (AuthenticationError, ValidationError)):
            logger.info(f"RPC call {call_id} failed: {e.code} {e.message}")
        return _error_response(call_id, e)
    except Exception:
        logger.exception(f"Unhandled error in RPC call {call_id}")
        return _error_response(call_id, ChatAppError("Internal server error"))


def _to_payload(response: RpcResponse) -> dict[str, Any]:
    body: dict[str, Any] = {"id": response.id}
    if response.error is not None:
        body["error"] = response.error.model_dump()
    else:
        body["result"] = response.result
    return body


def _status_for(response: RpcResponse) -> int:
    if response.error is None:
        return status.HTTP_200_OK
    return _STATUS_BY_CODE.get(response.error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("")
async def call_procedures(request: Request, user: OptionalUser, service: ChatServiceDep):
    """
    Run one procedure call or a batch of calls.

    Batches run sequentially in request order and always return 200 with
    one entry per call; a single call's HTTP status reflects its outcome.
    """
    try:
        payload = await request.json()
    except ValueError:
        error = _error_response(None, ValidationError("Request body must be JSON"))
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_to_payload(error))

    if not isinstance(payload, list):
        response = await dispatch(payload, service, user)
        return JSONResponse(status_code=_status_for(response), content=_to_payload(response))

    max_batch = get_settings().MAX_BATCH_SIZE
    if not payload or len(payload) > max_batch:
        error = _error_response(None, ValidationError(f"Batch must contain 1 to {max_batch} calls"))
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_to_payload(error))

    responses = [await dispatch(raw_call, service, user) for raw_call in payload]
    return JSONResponse(status_code=status.HTTP_200_OK, content=[_to_payload(r) for r in responses])


@router.get("/procedures")
async def list_procedures() -> list[str]:
    """Names of the available procedures."""
    return sorted(PROCEDURES)
