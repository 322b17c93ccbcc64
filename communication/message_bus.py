"""
Message Bus for agent communication.
Routes messages between rota agents and keeps a communication log.
"""
import threading
from collections import Counter
from typing import Callable, Dict, List, Optional
from rich.console import Console
from rich.table import Table

from .message import Message, MessageType

Handler = Callable[[Message], None]


class MessageBus:
    """
    In-process message bus for the rota agents.

    Features:
    - Direct and broadcast routing
    - Message history with filtering
    - Safe to use from the background scanner thread
    """

    TYPE_COLORS = {
        MessageType.CONFLICT: "yellow",
        MessageType.ASSIGNMENT_REJECTED: "yellow",
        MessageType.MATERIALIZED: "green",
        MessageType.ASSIGNMENT: "green",
        MessageType.SCAN_COMPLETE: "magenta",
    }

    def __init__(self, verbose: bool = True, console: Optional[Console] = None):
        """
        Initialize the message bus.

        Args:
            verbose: Whether to print messages to console
            console: Console to print to (a fresh one by default)
        """
        self.subscribers: Dict[str, Handler] = {}
        self.message_history: List[Message] = []
        self.undelivered: List[Message] = []
        self.verbose = verbose
        self.console = console or Console()
        self._lock = threading.RLock()

    def register(self, agent_name: str, handler: Handler) -> None:
        """
        Register an agent to receive messages.

        Args:
            agent_name: Unique name of the agent
            handler: Callback function to handle incoming messages
        """
        with self._lock:
            self.subscribers[agent_name] = handler
        if self.verbose:
            self.console.print(f"[dim]📡 Agent registered: {agent_name}[/dim]")

    def unregister(self, agent_name: str) -> None:
        with self._lock:
            self.subscribers.pop(agent_name, None)

    def send(self, message: Message) -> None:
        """
        Record a message and deliver it to its receiver, or to every other
        agent when it is a broadcast.

        Messages for an unknown receiver are kept in `undelivered`.
        """
        with self._lock:
            self.message_history.append(message)
            if message.is_broadcast:
                targets = [h for name, h in self.subscribers.items() if name != message.sender]
            else:
                handler = self.subscribers.get(message.receiver)
                targets = [handler] if handler else []
                if handler is None:
                    self.undelivered.append(message)

        if self.verbose:
            self._print_message(message)
            if not targets and not message.is_broadcast:
                self.console.print(f"[red]⚠️ Agent '{message.receiver}' not found![/red]")

        # Handlers run outside the lock so they may send replies
        for handler in targets:
            handler(message)

    def _print_message(self, message: Message) -> None:
        color = self.TYPE_COLORS.get(message.msg_type, "white")
        receiver = message.receiver or "ALL"

        content_str = str(message.content)
        if len(content_str) > 150:
            content_str = content_str[:150] + "..."

        self.console.print(
            f"[dim]{message.timestamp.strftime('%H:%M:%S.%f')[:-3]}[/dim] "
            f"[bold]{message.sender}[/bold] → [bold]{receiver}[/bold] "
            f"[{color}]({message.msg_type.value})[/{color}]"
        )
        if content_str:
            self.console.print(f"  [dim]└─ {content_str}[/dim]")

    def get_history(self,
                    sender: Optional[str] = None,
                    receiver: Optional[str] = None,
                    msg_type: Optional[MessageType] = None) -> List[Message]:
        """
        Get filtered message history.

        Args:
            sender: Filter by sender agent
            receiver: Filter by receiver agent
            msg_type: Filter by message type

        Returns:
            List of messages matching the filters
        """
        with self._lock:
            messages = list(self.message_history)

        if sender:
            messages = [m for m in messages if m.sender == sender]
        if receiver:
            messages = [m for m in messages if m.receiver == receiver]
        if msg_type:
            messages = [m for m in messages if m.msg_type == msg_type]
        return messages


    def print_summary(self) -> None:
        """Print a per-agent and per-type summary of communications."""
        history = self.get_history()
        sent = Counter(m.sender for m in history)
        received = Counter(m.receiver for m in history if m.receiver)

        table = Table(title="📊 Agent Communication Summary")
        table.add_column("Agent", style="cyan")
        table.add_column("Sent", justify="right")
        table.add_column("Received", justify="right")
        for agent in sorted(set(self.subscribers) | set(sent)):
            table.add_row(agent, str(sent[agent]), str(received[agent]))
        self.console.print(table)

        by_type = Counter(m.msg_type.value for m in history)
        if by_type:
            types = Table(title="Messages by Type")
            types.add_column("Type", style="magenta")
            types.add_column("Count", justify="right")
            for name, count in by_type.most_common():
                types.add_row(name, str(count))
            self.console.print(types)
