"""
In-process messaging between rota agents.
"""
from .message import Message, MessageType
from .message_bus import MessageBus

__all__ = ["Message", "MessageType", "MessageBus"]
