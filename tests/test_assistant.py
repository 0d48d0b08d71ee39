"""
Tests for inventory context building and the assistant's message assembly.
"""

import asyncio
from datetime import datetime
from types import SimpleNamespace

import pytest

from smart_inventory.agent.ai_client import OpenAICompatibleClient
from smart_inventory.agent.assistant import (
    INSIGHTS_PROMPT,
    PREDICTIONS_PROMPT,
    SYSTEM_PROMPT,
    InventoryAssistant,
    build_inventory_context,
    build_messages,
)
from smart_inventory.exceptions import ConfigurationException

from .conftest import FakeLlmClient


def make_item(name, category, stock):
    return SimpleNamespace(name=name, category=category, stock=stock, priority=None, alert_threshold=None)


ITEMS = [
    make_item("Absolut Vodka", "Spirits", 1),
    make_item("Cabernet Sauvignon", "Wines", 3),
    make_item("Corona Beer", "Beers", 24),
]


class TestInventoryContext:

    def test_empty_inventory(self):
        assert build_inventory_context([]) == "CURRENT INVENTORY: No inventory data available."

    def test_summary_lines(self):
        context = build_inventory_context(ITEMS, now=datetime(2024, 3, 1))
        assert context.startswith("CURRENT INVENTORY STATUS (2024-03-01):")
        assert "Total Items: 3" in context
        assert "Urgent Alerts: 1" in context
        assert "Low Stock Items: 1" in context
        assert "- Absolut Vodka: 1 units (threshold: 2)" in context
        assert "- Corona Beer (Beers): 24 units, Priority: medium" in context


class TestBuildMessages:

    def test_system_prompt_carries_context(self):
        messages = build_messages("CTX", "How is the bar?")
        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT + "\n\nCTX"}
        assert messages[-1] == {"role": "user", "content": "How is the bar?"}

    def test_history_is_truncated_to_last_ten_turns(self):
        history = [{"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}"} for i in range(14)]
        messages = build_messages("CTX", "next", history)
        assert len(messages) == 12
        assert messages[1]["content"] == "turn 4"
        assert messages[10]["content"] == "turn 13"


class TestInventoryAssistant:

    def test_chat_forwards_reply_verbatim(self):
        llm = FakeLlmClient(reply="Order 10 bottles of vodka.")
        response = asyncio.run(InventoryAssistant(llm).chat(ITEMS, "What should I buy?"))
        assert response.content == "Order 10 bottles of vodka."
        assert llm.calls[0]["messages"][-1]["content"] == "What should I buy?"

    def test_reports_use_fixed_prompts(self):
        llm = FakeLlmClient()
        assistant = InventoryAssistant(llm, report_max_tokens=1500)
        asyncio.run(assistant.predictions(ITEMS))
        asyncio.run(assistant.insights(ITEMS))
        assert llm.calls[0]["messages"][-1]["content"] == PREDICTIONS_PROMPT
        assert llm.calls[1]["messages"][-1]["content"] == INSIGHTS_PROMPT
        assert llm.calls[1]["max_tokens"] == 1500

    def test_unconfigured_client_raises(self):
        client = OpenAICompatibleClient(api_key="")
        assert not client.configured
        with pytest.raises(ConfigurationException) as exc:
            asyncio.run(client.complete([{"role": "user", "content": "hi"}]))
        assert exc.value.message == "AI service not configured"
        assert exc.value.status_code == 500
