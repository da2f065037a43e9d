"""Value types shared by the delivery pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum


class ErrorCode:
    """Failure codes carried on a DeliveryOutcome."""

    EMPTY_INPUT = "empty_input"
    PERMISSION_DENIED = "permission_denied"
    TARGET_NOT_RUNNING = "target_not_running"
    TARGET_NOT_FOUND = "target_not_found"
    ACTIVATION_FAILED = "activation_failed"
    PANEL_OPEN_UNCERTAIN = "panel_open_uncertain"
    ALL_STRATEGIES_FAILED = "all_strategies_failed"
    BUSY = "busy"


class DeliveryState(str, Enum):
    IDLE = "idle"
    PRECONDITION_CHECK = "precondition_check"
    LOCATING = "locating"
    OPENING_PANEL = "opening_panel"
    STRATEGY_1 = "strategy_1"
    STRATEGY_2 = "strategy_2"
    STRATEGY_3 = "strategy_3"
    RESTORING = "restoring"
    DONE = "done"


@dataclass(frozen=True)
class TargetIdentity:
    """The one application this process drives."""

    name: str = "Cursor"
    bundle_id: str = "io.cursor.Cursor"
    url_scheme: str = "cursor://"
    install_paths: tuple[str, ...] = (
        "/Applications/Cursor.app",
        "/Applications/Utilities/Cursor.app",
        "~/Applications/Cursor.app",
        "/Applications/Cursor/Cursor.app",
    )

    def matches(self, name: str | None, bundle_id: str | None) -> bool:
        # Either is enough: localized names differ across installs.
        return (bool(name) and name == self.name) or (
            bool(bundle_id) and bundle_id == self.bundle_id
        )

    @property
    def spotlight_query(self) -> str:
        return (
            f"kMDItemCFBundleIdentifier == '{self.bundle_id}'"
            f" || kMDItemDisplayName == '{self.name}.app'"
        )


@dataclass(frozen=True)
class TargetProcessHandle:
    """A running application. Only valid while that process lives."""

    pid: int
    name: str
    bundle_id: str | None = None


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class ScreenRegion:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class WindowInfo:
    owner_pid: int
    region: ScreenRegion
    title: str = ""


@dataclass(frozen=True)
class DeliveryRequest:
    text: str


@dataclass(frozen=True)
class StrategyResult:
    name: str
    attempted: bool = False
    succeeded: bool = False


@dataclass(frozen=True)
class DeliveryOutcome:
    succeeded: bool
    status_message: str
    error_code: str | None = None
    strategy_results: tuple[StrategyResult, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Timings:
    """Fixed pauses (seconds) that give the target UI time to react.

    Values come from Settings; tests use ``Timings.zero()``.
    """

    activation_delay: float = 0.5
    restore_delay: float = 0.5
    palette_delay: float = 0.3
    filter_delay: float = 0.3
    confirm_delay: float = 0.5
    toggle_delay: float = 0.5
    click_delay: float = 0.2
    panel_settle_delay: float = 0.5
    key_event_delay: float = 0.02
    char_delay: float = 0.03
    mouse_event_delay: float = 0.05
    triple_click_delay: float = 0.02
    clear_delay: float = 0.05
    submit_delay: float = 0.2

    @classmethod
    def zero(cls) -> Timings:
        return cls(**{f.name: 0.0 for f in fields(cls)})
