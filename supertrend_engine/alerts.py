from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from .recommender import Recommendation

_ACTIONABLE = re.compile(r"BUY|SELL", re.IGNORECASE)


@dataclass(frozen=True)
class AlertDigest:
    title: str
    body: str
    count: int


def _signal_text(rec: Union[Recommendation, Mapping[str, Any]]) -> str:
    if isinstance(rec, Recommendation):
        return rec.signal.value
    return str(rec.get("signal") or "")


def is_actionable(signal: Any) -> bool:
    """True if the signal label mentions BUY or SELL (case-insensitive substring)."""
    return bool(signal) and _ACTIONABLE.search(str(signal)) is not None


def select_alerts(results: Mapping[str, Union[Recommendation, Mapping[str, Any]]]) -> List[Tuple[str, str]]:
    """[(symbol, signal), ...] for actionable results, in result order."""
    out: List[Tuple[str, str]] = []
    for symbol, rec in results.items():
        text = _signal_text(rec)
        if is_actionable(text):
            out.append((symbol, text))
    return out


def build_alert_digest(matches: List[Tuple[str, str]], max_show: int = 6) -> Optional[AlertDigest]:
    """Short notification text: one `SYMBOL: SIGNAL` line per match, truncated to max_show."""
    if not matches:
        return None
    count = len(matches)
    lines = [f"{symbol}: {signal}" for symbol, signal in matches[:max_show]]
    more = f" (+{count - max_show} more)" if count > max_show else ""
    title = f"Trading Alerts: {count} signal{'s' if count > 1 else ''}"
    return AlertDigest(title=title, body="\n".join(lines) + more, count=count)

