# Command-delivery pipeline.
# Created: 2025-03-04

from CursorCommander.models import (
    DeliveryOutcome,
    DeliveryRequest,
    DeliveryState,
    ErrorCode,
    Point,
    ScreenRegion,
    StrategyResult,
    TargetIdentity,
    TargetProcessHandle,
    Timings,
    WindowInfo,
)
from CursorCommander.pipeline.locator import TargetLocator
from CursorCommander.pipeline.orchestrator import DeliveryOrchestrator
from CursorCommander.pipeline.panel import PanelOpener
from CursorCommander.pipeline.permissions import PermissionGate
from CursorCommander.pipeline.strategies import (
    DirectScriptStrategy,
    SyntheticEventStrategy,
    SystemEventsStrategy,
)

__all__ = [
    "DeliveryOrchestrator",
    "DeliveryOutcome",
    "DeliveryRequest",
    "DeliveryState",
    "DirectScriptStrategy",
    "ErrorCode",
    "PanelOpener",
    "PermissionGate",
    "Point",
    "ScreenRegion",
    "StrategyResult",
    "SyntheticEventStrategy",
    "SystemEventsStrategy",
    "TargetIdentity",
    "TargetLocator",
    "TargetProcessHandle",
    "Timings",
    "WindowInfo",
]
