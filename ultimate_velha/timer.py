"""Per-turn countdown for local two-player games.

The timer owns no clock: the caller feeds it elapsed seconds through
:meth:`TurnTimer.tick`, which keeps it deterministic and easy to drive from
any event loop.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass
class TurnTimer:
    base_seconds: float = 60.0
    step_seconds: float = 30.0
    min_seconds: float = 30.0
    remaining: float = field(init=False)
    running: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if self.min_seconds <= 0:
            raise ValueError("min_seconds must be positive")
        if self.base_seconds < self.min_seconds:
            raise ValueError("base_seconds must not be below min_seconds")
        self.remaining = self.base_seconds

    @classmethod
    def from_config(cls, cfg: Optional[Mapping[str, Any]]) -> "TurnTimer":
        cfg = cfg or {}
        return cls(
            base_seconds=float(cfg.get("base_seconds", 60.0)),
            step_seconds=float(cfg.get("step_seconds", 30.0)),
            min_seconds=float(cfg.get("min_seconds", 30.0)),
        )

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def reset(self) -> None:
        self.running = False
        self.remaining = self.base_seconds

    def adjust(self, delta: float) -> float:
        """Shift the base duration, never below ``min_seconds``, and refill."""

        self.base_seconds = max(self.min_seconds, self.base_seconds + delta)
        self.remaining = self.base_seconds
        return self.base_seconds

    def increase(self) -> float:
        return self.adjust(self.step_seconds)

    def decrease(self) -> float:
        return self.adjust(-self.step_seconds)

    def tick(self, seconds: float = 1.0) -> bool:
        """Advance the countdown; return True when the turn just ran out."""

        if not self.running:
            return False
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        self.remaining = max(0.0, self.remaining - seconds)
        if self.remaining > 0:
            return False
        logger.info("Turn timer expired after %.0fs", self.base_seconds)
        self.reset()
        return True
