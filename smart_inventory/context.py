"""
Application context.

Holds the app-scoped collaborators (change feed, alert board, role
directory, LLM and POS clients) that route handlers receive through
Depends(get_context) instead of module-level globals.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from . import crud
from .agent.ai_client import LlmClient, OpenAICompatibleClient
from .agent.assistant import InventoryAssistant
from .config import settings
from .events import ChangeFeed
from .permissions import RoleDirectory, StaticRoleDirectory
from .services.alert_service import AlertBoard
from .services.pos_client import PosClient, SimulatedPosClient


@dataclass
class AppContext:
    feed: ChangeFeed
    alert_board: AlertBoard
    roles: RoleDirectory
    llm: LlmClient
    assistant: InventoryAssistant
    pos: PosClient

    def close(self):
        self.alert_board.detach()
        self.feed.clear()


def build_context(
    session_factory: Callable,
    llm: Optional[LlmClient] = None,
    pos: Optional[PosClient] = None,
    roles: Optional[RoleDirectory] = None,
) -> AppContext:
    def load_items():
        db = session_factory()
        try:
            return crud.get_items(db)
        finally:
            db.close()

    feed = ChangeFeed()
    board = AlertBoard(load_items)
    board.attach(feed)

    llm = llm or OpenAICompatibleClient()
    return AppContext(
        feed=feed,
        alert_board=board,
        roles=roles or StaticRoleDirectory(),
        llm=llm,
        assistant=InventoryAssistant(llm, report_max_tokens=settings.LLM_REPORT_MAX_TOKENS),
        pos=pos or SimulatedPosClient(delay_seconds=settings.POS_SYNC_DELAY_SECONDS),
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context
