"""Monthly character budget for metered text-to-speech voices.

The budget is stored as a small JSON document::

    {"charactersUsed": 1234, "monthStart": "2026-10", "lastReset": 1791000000000}

and starts over whenever the calendar month changes.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

# Characters per month included with the voice tiers
NEURAL_VOICE_MONTHLY_CHARS = 1_000_000
STANDARD_VOICE_MONTHLY_CHARS = 4_000_000

# Keep a margin below the provider's hard limit
SAFETY_FRACTION = 0.9


def safety_limit(monthly_chars: int, fraction: float = SAFETY_FRACTION) -> int:
    """Usable budget for a tier, e.g. 900 000 for the neural tier."""
    return math.floor(monthly_chars * fraction)


DEFAULT_QUOTA_LIMIT = safety_limit(NEURAL_VOICE_MONTHLY_CHARS)


@dataclass
class QuotaUsage:
    characters_used: int
    month_start: str
    last_reset_ms: int

    def to_dict(self) -> dict:
        return {
            "charactersUsed": self.characters_used,
            "monthStart": self.month_start,
            "lastReset": self.last_reset_ms,
        }


class QuotaTracker:
    """Tracks characters spoken this month, optionally persisted to *path*."""

    def __init__(
        self,
        path: Path | str | None = None,
        limit: int = DEFAULT_QUOTA_LIMIT,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.path = Path(path).expanduser() if path is not None else None
        self.limit = limit
        self._now = now
        self._usage: QuotaUsage | None = None

    @property
    def usage(self) -> QuotaUsage:
        """Usage for the current month (a fresh record after a month change)."""
        month = self._current_month()
        if self._usage is None:
            self._usage = self._load()
        if self._usage is None or self._usage.month_start != month:
            if self._usage is not None:
                logger.info(
                    "Speech quota reset for %s (was %d characters in %s)",
                    month, self._usage.characters_used, self._usage.month_start,
                )
            self._usage = QuotaUsage(
                characters_used=0,
                month_start=month,
                last_reset_ms=int(self._now().timestamp() * 1000),
            )
        return self._usage

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.usage.characters_used)

    def can_spend(self, characters: int) -> bool:
        return self.usage.characters_used + characters <= self.limit

    def try_spend(self, characters: int) -> bool:
        """Record *characters* if they fit in the budget; return whether they did."""
        if not self.can_spend(characters):
            logger.warning(
                "Speech quota exhausted: %d used, %d requested, limit %d",
                self.usage.characters_used, characters, self.limit,
            )
            return False
        self.usage.characters_used += characters
        self._save()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _current_month(self) -> str:
        return self._now().strftime("%Y-%m")

    def _load(self) -> QuotaUsage | None:
        if self.path is None or not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return QuotaUsage(
                characters_used=int(data["charactersUsed"]),
                month_start=str(data["monthStart"]),
                last_reset_ms=int(data.get("lastReset", 0)),
            )
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable speech quota file %s: %s", self.path, exc)
            return None

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.usage.to_dict(), f, indent=2)
