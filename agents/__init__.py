"""
Agents for the Care Home Rota Scheduling System.

Each agent is a named service object with a lifecycle, logging and a
message bus mailbox.
"""
from .base_agent import AgentState, BaseAgent
from .coordinator import RotaCoordinatorAgent
from .conflict_scanner import ConflictScannerAgent
from .data_loader import DataLoaderAgent
from .rota_exporter import RotaExporterAgent

__all__ = [
    "AgentState",
    "BaseAgent",
    "RotaCoordinatorAgent",
    "ConflictScannerAgent",
    "DataLoaderAgent",
    "RotaExporterAgent",
]
