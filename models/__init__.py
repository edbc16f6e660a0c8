"""
Models package exports.
"""
from models.chat_models import Message, ConversationState, SearchResult
from models.config_models import ChatConfig, RagConfig

__all__ = [
    'Message',
    'ConversationState',
    'SearchResult',
    'ChatConfig',
    'RagConfig'
]
