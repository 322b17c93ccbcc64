"""
Message protocol for inter-agent communication.
Defines the envelopes the rota agents exchange over the message bus.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
import uuid


class MessageType(Enum):
    """Types of messages that rota agents can exchange."""


    # Data loading
    DATA_LOADED = "data_loaded"

    # Rota changes
    MATERIALIZED = "materialized"         # Shifts created from a weekly template
    TEMPLATE_UPDATED = "template_updated"
    ASSIGNMENT = "assignment"             # Staff assigned to a shift
    UNASSIGNMENT = "unassignment"
    ASSIGNMENT_REJECTED = "assignment_rejected"

    # Consistency scan
    CONFLICT = "conflict"                 # Conflict found on an existing assignment
    SCAN_COMPLETE = "scan_complete"

    # Export
    EXPORTED = "exported"


@dataclass
class Message:
    """
    Message structure for agent communication.

    Attributes:
        msg_type: Type of the message
        sender: Name of the sending agent
        receiver: Name of the receiving agent (None for broadcast)
        content: Message payload
        correlation_id: ID to track related messages
        timestamp: When the message was created
        metadata: Additional message metadata
    """
    msg_type: MessageType
    sender: str
    receiver: Optional[str]
    content: Any
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict = field(default_factory=dict)

    @property
    def is_broadcast(self) -> bool:
        return self.receiver is None

    def __str__(self) -> str:
        receiver_str = self.receiver or "ALL"
        content_preview = str(self.content)
        if len(content_preview) > 100:
            content_preview = content_preview[:100] + "..."
        return (
            f"[{self.timestamp.strftime('%H:%M:%S')}] "
            f"{self.sender} → {receiver_str} "
            f"({self.msg_type.value}): {content_preview}"
        )
