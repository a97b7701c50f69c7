from .router import get_gap_scanner, get_orchestrator, router

__all__ = ["get_gap_scanner", "get_orchestrator", "router"]
