"""
Inventory AI assistant.

Builds a plain-text summary of the inventory, wraps it in a fixed system
prompt and forwards it, together with the last turns of the conversation,
to the LlmClient. Replies are returned verbatim.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from ..constants import MAX_CONVERSATION_HISTORY, StockStatus
from ..services.stock_classifier import calculate_stock_status, get_product_priority
from .ai_client import AIResponse, LlmClient

logger = logging.getLogger("InventoryAssistant")

SYSTEM_PROMPT = """You are an intelligent AI assistant for an inventory management system. Your name is "Smart Inventory AI".

Your capabilities include:
1. Analyzing current stock levels and identifying items that need restocking
2. Predicting future inventory needs based on consumption patterns
3. Generating shopping lists with recommended quantities
4. Identifying overstocked items that might go to waste
5. Providing cost optimization recommendations
6. Answering questions about inventory status

When analyzing inventory data, consider:
- Priority levels (high, medium, low) affect urgency of restocking
- Alert thresholds indicate when items need attention
- Categories include: Spirits, Wines, Beers, Soft Drinks, Syrups

Always be helpful, concise, and provide actionable recommendations.
Format your responses clearly with bullet points or numbered lists when appropriate.
Respond in the same language the user writes in (English or Spanish)."""

PREDICTIONS_PROMPT = """Based on the current inventory data, provide:
1. Items likely to run out in the next 7 days
2. Recommended order quantities for each
3. Priority ranking for purchasing
4. Any cost-saving opportunities

Please format as a structured list."""

SHOPPING_LIST_PROMPT = """Generate a comprehensive shopping list for restocking. Include:
1. All items below their threshold levels
2. Suggested quantities to order (aim for 2 weeks of stock)
3. Group by category
4. Mark urgent items clearly
5. Include estimated priority for each item

Format it as a clear, actionable shopping list."""

INSIGHTS_PROMPT = """Analyze the current inventory and provide insights on:
1. Overall inventory health assessment
2. Categories that need attention
3. Potential waste risks (overstocked items)
4. Optimization recommendations
5. Any patterns or concerns you notice

Be specific and actionable in your recommendations."""

LOW_STOCK_LISTED = 10


def build_inventory_context(items: List, now: Optional[datetime] = None) -> str:
    """Summarize the inventory for the system prompt."""
    now = now or datetime.utcnow()
    if not items:
        return "CURRENT INVENTORY: No inventory data available."

    urgent, low_stock = [], []
    categories = defaultdict(lambda: {"count": 0, "total_stock": 0, "low_stock": 0})

    for item in items:
        status = calculate_stock_status(item)["status"]
        threshold = get_product_priority(item).threshold
        if status == StockStatus.URGENT:
            urgent.append((item, threshold))
        elif status in (StockStatus.NORMAL, StockStatus.INFO):
            low_stock.append((item, threshold))

        bucket = categories[item.category]
        bucket["count"] += 1
        bucket["total_stock"] += item.stock or 0
        if status in (StockStatus.URGENT, StockStatus.NORMAL, StockStatus.INFO):
            bucket["low_stock"] += 1

    lines = [
        f"CURRENT INVENTORY STATUS ({now.date().isoformat()}):",
        f"Total Items: {len(items)}",
        f"Urgent Alerts: {len(urgent)}",
        f"Low Stock Items: {len(low_stock)}",
        "",
        "CATEGORY BREAKDOWN:",
    ]
    for category, data in categories.items():
        lines.append(f"- {category}: {data['count']} items, {data['low_stock']} need attention")

    lines += ["", "URGENT ITEMS (Need immediate attention):"]
    if urgent:
        lines += [f"- {i.name}: {i.stock or 0} units (threshold: {t})" for i, t in urgent]
    else:
        lines.append("None")

    lines += ["", "LOW STOCK ITEMS:"]
    if low_stock:
        lines += [f"- {i.name}: {i.stock or 0} units" for i, _ in low_stock[:LOW_STOCK_LISTED]]
    else:
        lines.append("None")

    lines += ["", "FULL INVENTORY LIST:"]
    for item in items:
        priority = get_product_priority(item).priority.value
        lines.append(f"- {item.name} ({item.category}): {item.stock or 0} units, Priority: {priority}")

    return "\n".join(lines)


def build_messages(
    inventory_context: str,
    message: str,
    history: Optional[List[Dict[str, str]]] = None,
) -> List[Dict[str, str]]:
    """System prompt + inventory context, last MAX_CONVERSATION_HISTORY turns, then the user message."""
    messages = [{"role": "system", "content": SYSTEM_PROMPT + "\n\n" + inventory_context}]
    if history:
        messages += [
            {"role": turn["role"], "content": turn["content"]}
            for turn in history[-MAX_CONVERSATION_HISTORY:]
        ]
    messages.append({"role": "user", "content": message})
    return messages


class InventoryAssistant:
    def __init__(self, client: LlmClient, report_max_tokens: Optional[int] = None):
        self.client = client
        self.report_max_tokens = report_max_tokens

    async def chat(self, items: List, message: str, history: Optional[List[Dict[str, str]]] = None) -> AIResponse:
        messages = build_messages(build_inventory_context(items), message, history)
        logger.info(f"Chat request ({len(messages) - 2} history turns)")
        return await self.client.complete(messages)

    async def predictions(self, items: List) -> AIResponse:
        return await self.client.complete(build_messages(build_inventory_context(items), PREDICTIONS_PROMPT))

    async def shopping_list(self, items: List) -> AIResponse:
        return await self.client.complete(
            build_messages(build_inventory_context(items), SHOPPING_LIST_PROMPT),
            max_tokens=self.report_max_tokens,
        )

    async def insights(self, items: List) -> AIResponse:
        return await self.client.complete(
            build_messages(build_inventory_context(items), INSIGHTS_PROMPT),
            max_tokens=self.report_max_tokens,
        )
