"""
AI assistant routes. Each call reads the current inventory, builds the
context and forwards it to the LLM; the reply text is returned verbatim.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..agent.ai_client import AIResponse
from ..auth import get_current_user
from ..context import AppContext, get_context
from ..database import get_db
from ..permissions import CurrentUser

router = APIRouter(prefix="/api/ai", tags=["ai"])
logger = logging.getLogger("AIAPI")


def _reply(response: AIResponse, key: str = "message") -> dict:
    return {
        "success": True,
        "data": {
            key: response.content,
            "model": response.model_used,
            "usage": response.usage,
        },
    }


@router.post("/chat")
async def chat(
    payload: schemas.ChatRequest,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    history = [turn.model_dump() for turn in payload.conversation_history]
    response = await ctx.assistant.chat(crud.get_items(db), payload.message, history)
    return _reply(response)


@router.post("/predictions")
async def predictions(
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    return _reply(await ctx.assistant.predictions(crud.get_items(db)), "predictions")


@router.post("/shopping-list")
async def shopping_list(
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    return _reply(await ctx.assistant.shopping_list(crud.get_items(db)), "shoppingList")


@router.post("/insights")
async def insights(
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
    user: CurrentUser = Depends(get_current_user),
):
    return _reply(await ctx.assistant.insights(crud.get_items(db)), "insights")
