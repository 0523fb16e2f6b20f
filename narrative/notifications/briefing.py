"""HTML daily briefing for Telegram.

Telegram's HTML parse mode only needs ``&``, ``<`` and ``>`` escaped.
"""

from __future__ import annotations

from typing import Mapping, Optional

from narrative.signals.scoring import interpret_score
from narrative.signals.weights import COMPONENT_WEIGHTS
from narrative.types import NarrativeScore, SignalType

SEPARATOR = "━" * 29
BRIEFING_SIGNALS = 5

# (emoji, label, one-line method description)
COMPONENT_LABELS: dict[SignalType, tuple[str, str, str]] = {
    SignalType.MARKET_ALPHA: ("📈", "Index Alpha", "Multi-timeframe α vs MSCI World"),
    SignalType.PREDICTION_MARKET: ("🔮", "Polymarket", "Raw prediction market probability"),
    SignalType.CONTRACT: ("🏛️", "Gov Contracts", "ln($volume) + count + sticky"),
    SignalType.DEVELOPER_ACTIVITY: ("👨‍💻", "GitHub", "ln(commits) + trend + breadth"),
    SignalType.NEWS: ("📰", "News", "Sentiment analysis (est.)"),
    SignalType.FUNDING: ("💰", "Funding", "ln($vol) + rounds + recency"),
    SignalType.RELEASE_VELOCITY: ("🔧", "Technical", "ln(releases) + major + breadth"),
}

SIGNAL_TYPE_EMOJI: dict[SignalType, str] = {
    SignalType.MARKET_ALPHA: "📈",
    SignalType.PREDICTION_MARKET: "🔮",
    SignalType.CONTRACT: "🏛️",
    SignalType.DEVELOPER_ACTIVITY: "👨‍💻",
    SignalType.NEWS: "📰",
    SignalType.FUNDING: "💰",
    SignalType.RELEASE_VELOCITY: "🔧",
}


def escape_html(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def format_change(current: int, previous: Optional[int]) -> str:
    change = current - previous if previous is not None else 0
    if change > 0:
        return f"▲ +{change:.1f}"
    if change < 0:
        return f"▼ {change:.1f}"
    return "━ 0"


def _briefing_weights(score: NarrativeScore) -> dict[SignalType, float]:
    weights: dict[SignalType, float] = {}
    for kind, weight in COMPONENT_WEIGHTS.items():
        if kind.value in score.components:
            weights[kind] = weight
    total = sum(weights.values())
    if total <= 0:
        return weights
    return {k: w / total for k, w in weights.items()}


def format_daily_briefing(
    score: NarrativeScore,
    previous: Optional[NarrativeScore] = None,
    weights: Optional[Mapping[SignalType, float]] = None,
) -> str:
    """Render the daily digest as Telegram HTML.

    Args:
        score: Score to describe
        previous: Prior score for the change line; None renders "━ 0"
        weights: Component weights shown next to each score. Defaults to the
            fixed weights of the components present in `score`, renormalized.

    Returns:
        HTML message text
    """
    interpretation = interpret_score(score.overall)
    weights = dict(weights) if weights is not None else _briefing_weights(score)
    previous_overall = previous.overall if previous is not None else None
    date_line = score.timestamp.strftime("%A, %B %d, %Y").replace(" 0", " ")

    lines = [
        "📊 <b>ROBOTICS NARRATIVE INDEX</b>",
        date_line,
        "",
        f"<b>{score.overall}</b> {interpretation.emoji} {interpretation.label}",
        f"{format_change(score.overall, previous_overall)} vs yesterday",
        "",
        SEPARATOR,
        "",
        "<b>COMPONENT SCORES</b>",
        "",
    ]

    for kind, weight in weights.items():
        emoji, label, method = COMPONENT_LABELS[kind]
        lines.append(f"{emoji} <b>{label}:</b> {score.component(kind)} ({weight * 100:.0f}%)")
        lines.append(f"   {escape_html(method)}")
        lines.append("")

    terms = [f"{score.component(kind)}×{weight:.2f}" for kind, weight in weights.items()]
    lines.extend(
        [
            SEPARATOR,
            "",
            "<b>FORMULA</b>",
            "RNI = Σ(component × weight)",
            f"    = {' + '.join(terms)}",
            f"    = <b>{score.overall}</b>",
            "",
            SEPARATOR,
            "",
        ]
    )

    if score.signals:
        lines.append("<b>KEY SIGNALS</b>")
        for signal in score.signals[:BRIEFING_SIGNALS]:
            emoji = SIGNAL_TYPE_EMOJI.get(signal.type, "📌")
            lines.append(f"{emoji} {escape_html(signal.title)}")
        lines.extend(["", SEPARATOR, ""])

    lines.append(interpretation.action)
    lines.append(f"Confidence: {round(score.confidence * 100)}%")
    return "\n".join(lines)
