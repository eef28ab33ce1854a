from __future__ import annotations


class FlowError(Exception):
    """Base class for intake flow errors."""


class UnknownNodeError(FlowError):
    """Session points at a node id the loaded flow does not define."""

    def __init__(self, node_id: str | None) -> None:
        super().__init__(f"Unknown flow node: {node_id!r}")
        self.node_id = node_id


class InvalidTransitionError(FlowError):
    """Operation is not allowed from the session's current view."""

    def __init__(self, view: str, operation: str) -> None:
        super().__init__(f"Cannot {operation} while in {view}")
        self.view = view
        self.operation = operation


class FlowLoadError(FlowError):
    """Flow document could not be read or parsed."""
