"""FastAPI server for the personal finance dashboard."""

# Load .env FIRST so OPENAI_API_KEY / LANGCHAIN_* are visible to everything
# imported below (``@traceable`` is evaluated at import time).
from dotenv import load_dotenv
load_dotenv()

from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError
from pydantic.alias_generators import to_camel

from src.memory.models import (
    Account,
    ChatMessage,
    SavingsGoal,
    UserProfileUpdate,
    UserPublic,
)
from src.utils.config import get_section
from src.utils.logging import get_logger
from src.workflow.dashboard import DashboardService, DashboardSummary

logger = get_logger(__name__)


# ── Request models ─────────────────────────────────────────────────────────────

class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    user_id: StrictInt

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {"message": "How should I invest $10,000?", "userId": 1}
        },
    )


# ── Error handling ─────────────────────────────────────────────────────────────

def format_validation_errors(errors: list) -> str:
    """Turn pydantic error dicts into one human-readable line."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "Invalid value")
        parts.append(f"{msg} at \"{loc}\"" if loc else msg)
    return "Validation error: " + "; ".join(parts)


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={"detail": format_validation_errors(exc.errors())},
    )


# ── Dependencies ───────────────────────────────────────────────────────────────

def get_service(request: Request) -> DashboardService:
    return request.app.state.service


# ── Routes ─────────────────────────────────────────────────────────────────────

api = APIRouter(prefix="/api")


@api.get("/users/{user_id}", response_model=UserPublic, summary="Get a user (without password)")
def get_user(user_id: int, service: DashboardService = Depends(get_service)) -> UserPublic:
    user = service.get_public_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@api.patch(
    "/users/{user_id}/profile",
    response_model=UserPublic,
    summary="Update monthly income and/or risk tolerance",
)
def update_profile(
    user_id: int,
    changes: UserProfileUpdate,
    service: DashboardService = Depends(get_service),
) -> UserPublic:
    """Unknown fields in the body are rejected with 400."""
    try:
        user = service.update_profile(user_id, changes)
    except Exception as exc:
        logger.error("Error updating profile for user %d: %s", user_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc) or "Internal server error") from exc
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@api.get("/accounts/{user_id}", response_model=List[Account], summary="List a user's accounts")
def list_accounts(user_id: int, service: DashboardService = Depends(get_service)) -> List[Account]:
    return service.list_accounts(user_id)


@api.get(
    "/savings-goals/{user_id}",
    response_model=List[SavingsGoal],
    summary="List a user's savings goals",
)
def list_savings_goals(
    user_id: int, service: DashboardService = Depends(get_service)
) -> List[SavingsGoal]:
    return service.list_savings_goals(user_id)


@api.get(
    "/summary/{user_id}",
    response_model=DashboardSummary,
    summary="Net worth and savings-goal progress for the overview cards",
)
def get_summary(user_id: int, service: DashboardService = Depends(get_service)) -> DashboardSummary:
    return service.get_summary(user_id)


@api.get("/chat/{user_id}", response_model=List[ChatMessage], summary="Chat history, oldest first")
def get_chat(user_id: int, service: DashboardService = Depends(get_service)) -> List[ChatMessage]:
    return service.list_chat_messages(user_id)


@api.post("/chat", response_model=List[ChatMessage], summary="Send a message to the assistant")
def post_chat(request: ChatRequest, service: DashboardService = Depends(get_service)) -> List[ChatMessage]:
    """
    Store the message, get the assistant's reply and return the user's whole
    chat history.  Provider failures come back as an assistant message, not
    as an HTTP error.
    """
    logger.info("POST /api/chat  user=%d  message=%s", request.user_id, request.message[:80])
    try:
        return service.post_chat(request.message, request.user_id)
    except Exception as exc:
        logger.error("Error processing chat message: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc) or "Internal server error") from exc


# ── App factory ────────────────────────────────────────────────────────────────

def create_app(service: Optional[DashboardService] = None) -> FastAPI:
    """
    Build the FastAPI app around *service* (a seeded service built from
    config.yaml when omitted).
    """
    app = FastAPI(
        title="Personal Finance Dashboard",
        description="Accounts, savings goals and an AI financial assistant.",
        version="1.0.0",
    )
    app.state.service = service or DashboardService.from_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)

    @app.get("/health", summary="Health check")
    def health_check() -> dict:
        return {"status": "ok"}

    app.include_router(api)
    return app


app = create_app()


# ── Entry point (local dev) ────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    _server_cfg = get_section("server")
    uvicorn.run(
        "src.web_app.server:app",
        host=_server_cfg.get("host", "0.0.0.0"),
        port=int(_server_cfg.get("port", 5000)),
        reload=True,
    )
