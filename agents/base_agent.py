"""
Base Agent class that all rota agents inherit from.
Provides common functionality for agent communication and lifecycle.

This module defines:
- AgentState: Lifecycle state enumeration
- BaseAgent: Abstract base implementation
"""
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional
from rich.console import Console
from pathlib import Path
import logging
import os
import time
import traceback

from communication.message import Message, MessageType
from communication.message_bus import MessageBus


class AgentState(Enum):
    """Agent lifecycle states."""
    INITIALIZING = "initializing"
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"
    SHUTDOWN = "shutdown"


class BaseAgent(ABC):
    """
    Abstract base class for all agents in the rota system.

    Provides:
    - Message sending/receiving via MessageBus
    - State management with explicit lifecycle
    - Dual logging (console + file)
    - Error handling with graceful degradation

    Attributes:
        name: Unique identifier for the agent
        message_bus: Reference to the central message bus
        agent_state: Current lifecycle state (AgentState enum)
        is_active: Whether the agent is currently active
    """

    # Class-level file logger (shared across all agents)
    _file_logger: Optional[logging.Logger] = None
    _log_file_path: Optional[str] = None

    LOG_LEVELS = {
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "debug": logging.DEBUG,
        "success": logging.INFO,
    }

    @classmethod
    def setup_file_logging(cls, log_dir: str = "logs") -> str:
        """
        Set up file logging for all agents.

        Args:
            log_dir: Directory for log files

        Returns:
            Path to the log file
        """
        if cls._file_logger is not None:
            return cls._log_file_path

        Path(log_dir).mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(log_dir, f"rota_log_{timestamp}.txt")

        logger = logging.getLogger("RotaScheduler")
        logger.setLevel(logging.DEBUG)

        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

        cls._file_logger = logger
        cls._log_file_path = log_file

        logger.info("=" * 70)
        logger.info("CARE HOME ROTA SCHEDULING SYSTEM - LOG FILE")
        logger.info(f"Session started: {datetime.now().isoformat()}")
        logger.info("=" * 70)

        return log_file

    @classmethod
    def close_file_logging(cls) -> None:
        """Detach and close the shared file handler."""
        if cls._file_logger is None:
            return
        for handler in list(cls._file_logger.handlers):
            handler.close()
            cls._file_logger.removeHandler(handler)
        cls._file_logger = None
        cls._log_file_path = None

    def __init__(self, name: str, message_bus: MessageBus):
        """
        Initialize the agent.

        Args:
            name: Unique name for this agent
            message_bus: The central message bus for communication
        """
        self.name = name
        self.message_bus = message_bus
        self.agent_state = AgentState.INITIALIZING
        self.is_active = True
        self.console = Console(quiet=not message_bus.verbose)
        self._message_handlers: Dict[MessageType, Callable[[Message], None]] = {}
        self._error_count = 0
        self._max_errors = 3
        self._last_execution_time: Optional[float] = None

        self.message_bus.register(self.name, self._handle_message)
        self._setup_handlers()

        self._transition_state(AgentState.IDLE)
        self.log("Agent initialized and ready", "debug")

    def _setup_handlers(self) -> None:
        """Map message types to handlers. Override in subclasses."""
        self._message_handlers = {}

    def _handle_message(self, message: Message) -> None:
        handler = self._message_handlers.get(message.msg_type)
        if handler:
            handler(message)
        else:
            self._on_unhandled_message(message)

    def _on_unhandled_message(self, message: Message) -> None:
        self.log(f"Ignoring {message.msg_type.value} from {message.sender}", "debug")

    # ==================== Message Sending ====================

    def send(self,
             msg_type: MessageType,
             content: Any,
             receiver: Optional[str] = None,
             metadata: Optional[dict] = None) -> Message:
        """
        Send a message through the message bus.

        Args:
            msg_type: Type of message
            content: Message payload
            receiver: Target agent (None for broadcast)
            metadata: Additional metadata

        Returns:
            The sent message
        """
        message = Message(
            msg_type=msg_type,
            sender=self.name,
            receiver=receiver,
            content=content,
            metadata=metadata or {}
        )

        self._audit(message)
        self.message_bus.send(message)
        return message

    def _audit(self, message: Message) -> None:
        if not BaseAgent._file_logger:
            return
        preview = str(message.content)
        if len(preview) > 120:
            preview = preview[:120] + "..."
        BaseAgent._file_logger.info(
            "[MessageBus] %s → %s (%s) correlation=%s | %s",
            message.sender,
            message.receiver or "ALL",
            message.msg_type.value,
            message.correlation_id or "-",
            preview,
        )

    # ==================== Lifecycle ====================

    @abstractmethod
    def execute(self, **kwargs) -> Any:
        """
        Execute the agent's main task.

        Returns:
            Result of the agent's execution
        """

    def startup(self) -> None:
        """Start up the agent. Called before first execution."""
        self.is_active = True
        self._error_count = 0
        self._transition_state(AgentState.IDLE)
        self.log("🟢 Agent started", "success")

    def shutdown(self) -> None:
        """Unregister from the message bus and log final status."""
        self._transition_state(AgentState.SHUTDOWN)
        self.is_active = False
        self.message_bus.unregister(self.name)
        self.log(f"🔴 Agent shutdown (errors: {self._error_count})", "info")

    def health_check(self) -> bool:
        """
        Check if the agent is healthy and ready to process.

        Returns:
            True if agent is healthy, False otherwise
        """
        return (
            self.is_active and
            self.agent_state not in [AgentState.ERROR, AgentState.SHUTDOWN] and
            self._error_count < self._max_errors
        )

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self.agent_state.value,
            "is_active": self.is_active,
            "error_count": self._error_count,
            "max_errors": self._max_errors,
            "is_healthy": self.health_check(),
            "execution_time": self._last_execution_time,
        }

    # ==================== Logging ====================

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message with agent context (dual: console + file).

        Args:
            message: The log message
            level: Log level (info, warning, error, debug, success)
        """
        colors = {
            "info": "blue",
            "warning": "yellow",
            "error": "red",
            "debug": "dim",
            "success": "green"
        }
        color = colors.get(level, "white")
        self.console.print(f"[{color}][{self.name}] {message}[/{color}]")

        if BaseAgent._file_logger:
            BaseAgent._file_logger.log(
                self.LOG_LEVELS.get(level, logging.INFO), f"[{self.name}] {message}"
            )

    # ==================== State Management ====================

    def _transition_state(self, new_state: AgentState) -> None:
        old_state = self.agent_state
        self.agent_state = new_state

        if BaseAgent._file_logger:
            BaseAgent._file_logger.debug(
                f"[{self.name}] State: {old_state.value} → {new_state.value}"
            )

    # ==================== Error Handling ====================

    def _handle_error(self, error: Exception, context: str = "") -> bool:
        """
        Handle an error with graceful degradation.

        Args:
            error: The exception that occurred
            context: Description of what was happening when error occurred

        Returns:
            True if agent can continue, False if should stop
        """
        self._error_count += 1
        self._transition_state(AgentState.ERROR)

        error_msg = f"Error in {context}: {type(error).__name__}: {error}"
        self.log(error_msg, "error")

        if BaseAgent._file_logger:
            BaseAgent._file_logger.error(f"[{self.name}] Traceback:\n{traceback.format_exc()}")

        if self._error_count >= self._max_errors:
            self.log(f"Max errors ({self._max_errors}) reached - agent degraded", "warning")
            return False

        self.log(f"Error {self._error_count}/{self._max_errors} - continuing with degraded mode", "warning")
        self._transition_state(AgentState.IDLE)
        return True

    def safe_execute(self, **kwargs) -> Any:
        """
        Execute with error handling and graceful degradation.

        Returns:
            Result of execute() or None if an error occurred and the agent
            can continue

        Raises:
            Exception: The original error once the agent is degraded
        """
        started = time.perf_counter()
        try:
            self._transition_state(AgentState.PROCESSING)
            result = self.execute(**kwargs)
            self._transition_state(AgentState.COMPLETED)
            return result
        except Exception as e:
            if not self._handle_error(e, "execute()"):
                raise
            return None
        finally:
            self._last_execution_time = time.perf_counter() - started

    def __str__(self) -> str:
        status = "active" if self.is_active else "inactive"
        return f"{self.name} ({self.__class__.__name__}, {status})"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name='{self.name}', active={self.is_active})>"
