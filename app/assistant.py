"""Command source backed by an OpenAI chat model through LangChain."""

from __future__ import annotations

import datetime
import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from commands import build_command_context
from config import COMMAND_MODEL
from errors import CommandSourceError
from roster import Roster

logger = logging.getLogger(__name__)


def get_model():
    """Get the chat model that answers roster instructions."""
    return ChatOpenAI(
        model=COMMAND_MODEL,
        temperature=0,
    )


def message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, list):
        # Multi-part replies: keep the text parts in order.
        return "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)
    return str(content or "")


class ChatModelCommandSource:
    """Sends the roster context plus one instruction and returns the raw reply text.

    The model is created on first use so the API can start without credentials.
    """

    def __init__(self, model: Any = None) -> None:
        self._model = model

    @property
    def model(self) -> Any:
        if self._model is None:
            self._model = get_model()
        return self._model

    def respond(self, instruction: str, roster: Roster, reference_date: datetime.date) -> str:
        messages = [
            SystemMessage(content=build_command_context(roster, reference_date)),
            HumanMessage(content=instruction),
        ]
        try:
            reply = self.model.invoke(messages)
        except Exception as exc:
            logger.error("Command service call failed: %s", exc)
            raise CommandSourceError(f"Command service unavailable: {exc}") from exc
        return message_text(reply)
