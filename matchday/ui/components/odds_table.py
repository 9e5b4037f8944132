"""Odds tables for the match and prediction views."""
import pandas as pd
import streamlit as st

from matchday.models.entities import OddsMarket
from matchday.views.fixture_view import FixtureView, relative_time


def best_odds_frame(view: FixtureView) -> pd.DataFrame:
    """One row per 1X2 outcome with the best price and its bookmaker."""
    labels = {
        "home": view.fixture.home_name,
        "draw": "Draw",
        "away": view.fixture.away_name,
    }
    rows = []
    for side in ("home", "draw", "away"):
        best = view.best_odds.get(side)
        if best is None:
            continue
        rows.append({"Outcome": labels[side], "Best Price": best.price, "Bookmaker": best.bookmaker})
    return pd.DataFrame(rows, columns=["Outcome", "Best Price", "Bookmaker"])


def market_frame(markets: list[OddsMarket]) -> pd.DataFrame:
    """Flatten totals/spreads markets into bookmaker rows."""
    rows = []
    for market in markets:
        for outcome in market.values:
            rows.append({
                "Bookmaker": market.bookmaker,
                "Outcome": outcome.name,
                "Line": outcome.point,
                "Price": outcome.price,
            })
    return pd.DataFrame(rows, columns=["Bookmaker", "Outcome", "Line", "Price"])


def render_odds(view: FixtureView) -> None:
    if not view.odds:
        st.info("No odds available")
        return

    if view.odds_updated_at:
        st.caption(f"Updated {relative_time(view.odds_updated_at)}")

    best = best_odds_frame(view)
    if not best.empty:
        st.markdown("##### Best 1X2 Odds")
        st.dataframe(best, hide_index=True, use_container_width=True)

    if view.totals:
        st.markdown("##### Over/Under Goals")
        st.dataframe(market_frame(view.totals), hide_index=True, use_container_width=True)

    if view.spreads:
        st.markdown("##### Handicap")
        st.dataframe(market_frame(view.spreads), hide_index=True, use_container_width=True)
