"""Services composed from the store-backed components."""

from cosmic_core.services.chat_orchestrator import ChatOrchestrator

__all__ = ["ChatOrchestrator"]
