"""
Operator channels - notifications, single-line prompts and sheets

The core never renders anything itself; it talks to the operator through an
OperatorChannel. ConsoleOperator backs the command-line session and
ScriptedOperator replays canned answers and records what was shown.
"""

import asyncio
import logging
from typing import List, Optional, Protocol
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class PromptRequest(BaseModel):
    """A single-line text prompt"""
    title: str = Field(..., description="Prompt title")
    message: str = Field(..., description="Question shown to the operator")
    placeholder: str = Field("", description="Hint shown in an empty field")
    initial_text: str = Field("", description="Pre-filled answer")
    numeric: bool = Field(False, description="Ask for a number keyboard")


class OperatorChannel(Protocol):

    def notify(self, text: str) -> None:
        """Fire-and-forget banner"""
        ...

    async def prompt(self, request: PromptRequest) -> Optional[str]:
        """Return the answer, or None when the operator cancels"""
        ...

    def present_sheet(self, tag: str) -> None:
        """Open the full form that belongs to an action"""
        ...


class ConsoleOperator:
    """Operator channel on stdin/stdout"""

    def notify(self, text: str) -> None:
        print(f"📣 {text}")

    async def prompt(self, request: PromptRequest) -> Optional[str]:
        print(f"❓ {request.title}")
        print(request.message)
        suffix = f" [{request.initial_text}]" if request.initial_text else ""
        try:
            answer = await asyncio.to_thread(input, f"> {suffix} ")
        except EOFError:
            return None

        answer = answer.strip()
        if not answer:
            return request.initial_text or None
        if answer.lower() in ("q", "cancel"):
            return None
        return answer

    def present_sheet(self, tag: str) -> None:
        print(f"🗂️  Form for {tag} is not available in the console")


class ScriptedOperator:
    """
    Operator channel that answers prompts from a list and records everything.

    An answer of None means the operator cancelled. When the answers run out
    every further prompt is cancelled.
    """

    def __init__(self, answers: Optional[List[Optional[str]]] = None):
        self.answers = list(answers or [])
        self.notices: List[str] = []
        self.prompts: List[PromptRequest] = []
        self.sheets: List[str] = []

    def notify(self, text: str) -> None:
        logger.info(f"📣 {text}")
        self.notices.append(text)

    async def prompt(self, request: PromptRequest) -> Optional[str]:
        self.prompts.append(request)
        if not self.answers:
            return None
        return self.answers.pop(0)

    def present_sheet(self, tag: str) -> None:
        self.sheets.append(tag)
