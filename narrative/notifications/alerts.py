"""Change and major-signal alerts derived from consecutive scores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from narrative.notifications.briefing import escape_html
from narrative.signals.scoring import interpret_score
from narrative.types import NarrativeScore, SignalType

logger = logging.getLogger(__name__)

SCORE_CHANGE_THRESHOLD = 5
MAJOR_SIGNAL_IMPACT = 3


class AlertKind(str, Enum):
    SCORE_CHANGE = "score_change"
    SIGNAL = "signal"
    CONTRACT = "contract"
    FUNDING = "funding"
    RELEASE = "release"


ALERT_EMOJI: dict[AlertKind, str] = {
    AlertKind.SCORE_CHANGE: "📊",
    AlertKind.SIGNAL: "🔔",
    AlertKind.CONTRACT: "🏛️",
    AlertKind.FUNDING: "💰",
    AlertKind.RELEASE: "🚀",
}

_SIGNAL_ALERT_KIND: dict[SignalType, AlertKind] = {
    SignalType.CONTRACT: AlertKind.CONTRACT,
    SignalType.FUNDING: AlertKind.FUNDING,
    SignalType.RELEASE_VELOCITY: AlertKind.RELEASE,
}


@dataclass(frozen=True)
class Alert:
    kind: AlertKind
    title: str
    body: str
    score: Optional[int] = None
    confidence: Optional[float] = None


def detect_alerts(current: NarrativeScore, previous: Optional[NarrativeScore]) -> list[Alert]:
    """Alerts worth pushing for `current`.

    A score-change alert fires when the composite moved by 5 or more since
    `previous`; every signal with impact >= 3 yields its own alert.
    """
    alerts: list[Alert] = []

    if previous is not None:
        change = current.overall - previous.overall
        if abs(change) >= SCORE_CHANGE_THRESHOLD:
            direction = "increased" if change > 0 else "decreased"
            driver = current.signals[0].title if current.signals else "Multiple factors"
            alerts.append(
                Alert(
                    kind=AlertKind.SCORE_CHANGE,
                    title=f"Narrative Index {direction} by {abs(change):.1f}%",
                    body=(
                        f"The Robotics Narrative Index has {direction} from "
                        f"{previous.overall}% to {current.overall}% in the last check.\n\n"
                        f"Top driver: {driver}"
                    ),
                    score=current.overall,
                    confidence=current.confidence,
                )
            )
    else:
        logger.debug("No previous score, skipping change check")

    for signal in current.signals:
        if signal.impact >= MAJOR_SIGNAL_IMPACT:
            alerts.append(
                Alert(
                    kind=_SIGNAL_ALERT_KIND.get(signal.type, AlertKind.SIGNAL),
                    title=signal.title,
                    body=signal.description,
                    score=current.overall,
                )
            )

    return alerts


def format_alert(alert: Alert) -> str:
    """Render an alert as Telegram HTML."""
    text = f"{ALERT_EMOJI[alert.kind]} <b>{escape_html(alert.title)}</b>\n\n{escape_html(alert.body)}"
    if alert.score is not None:
        interpretation = interpret_score(alert.score)
        text += (
            f"\n\n📊 <b>Narrative Index:</b> {alert.score}% "
            f"{interpretation.emoji} {interpretation.label}"
        )
    if alert.confidence is not None:
        text += f"\n🎯 <b>Confidence:</b> {round(alert.confidence * 100)}%"
    return text
