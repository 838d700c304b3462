"""Human-readable audit report of an analysis run."""

from collections.abc import Sequence

from agent.analyzer import TokenAnalysisResult
from agent.routing import MultiHop, NoRoute, Route

_RULE_WIDTH = 50


def format_route(route: Route) -> str:
    if isinstance(route, NoRoute):
        return f"  route: none ({route.reason})"
    hops = " -> ".join(leg.pool for leg in route.legs)
    kind = f"via {route.via}" if isinstance(route, MultiHop) else "direct"
    return f"  route: {kind} [{hops}]"


def format_result(result: TokenAnalysisResult) -> str:
    token = result.token
    breakdown = result.confidence.breakdown
    stats = result.decision_stats
    lines = [
        f"Token: {token.metadata.name or token.symbol} ({token.symbol}) "
        f"${token.market.price_usd:,.6g}",
        f"Buying Confidence: {result.buying_confidence * 100:.2f}%",
        f"  decisions: {stats.buy_count} buy ({stats.profitable_buy_count} profitable), "
        f"{stats.sell_count} sell ({stats.profitable_sell_count} profitable), "
        f"avg profit {stats.average_profit_percent:.2f}%",
        f"  decision type: {breakdown.decision_type_score:.3f}"
        f"  similarity: {breakdown.similarity_score:.3f}"
        f"  profitability: {breakdown.profitability_score:.3f}",
        f"  volatility: {breakdown.volatility_adjustment:.3f}"
        f"  sample size: {breakdown.sample_size_confidence:.3f}"
        f"  modifier: {breakdown.modifier:.3f}",
    ]
    if result.route is not None:
        lines.append(format_route(result.route))
    return "\n".join(lines)


def format_analysis_results(results: Sequence[TokenAnalysisResult]) -> str:
    """Render results as a plain-text report, one block per token."""
    header = ["[Analysis Results]", "=" * _RULE_WIDTH]
    if not results:
        return "\n".join([*header, "No tokens met the confidence threshold."])

    blocks = [f"{format_result(r)}\n{'-' * _RULE_WIDTH}" for r in results]
    return "\n".join(header) + "\n" + "\n".join(blocks)
