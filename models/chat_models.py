"""
Data models for chat processing.
Contains the message type, per-session conversation state and search results.
"""
from dataclasses import dataclass, field
from typing import List, Literal
from pydantic import BaseModel


class Message(BaseModel):
    """Chat message model."""
    role: Literal["user", "assistant", "system"]
    content: str


@dataclass
class ConversationState:
    """
    State owned by one chat session.
    Holds the history, the last formatted search results and the connectivity flag.
    """
    model: str
    host: str
    rag_enabled: bool
    messages: List[Message] = field(default_factory=list)
    last_search_results: str = ""
    connection_checked: bool = False

    def append(self, role: str, content: str) -> int:
        """Append a message and return its position in the history."""
        self.messages.append(Message(role=role, content=content))
        return len(self.messages) - 1

    def snapshot(self) -> List[Message]:
        """Copy of the history that callers may mutate freely."""
        return [message.model_copy() for message in self.messages]


@dataclass
class SearchResult:
    """One web search hit."""
    title: str
    url: str
    snippet: str = ""
