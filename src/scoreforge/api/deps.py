# src/scoreforge/api/deps.py

"""Shared FastAPI dependencies for the API routers."""

from scoreforge import config
from scoreforge.ranking.index import RankingIndex

# One index per process; projections are rebuilt lazily from the store
ranking_index = RankingIndex(config.INDEXED_SORT_FIELDS)


def get_ranking_index() -> RankingIndex:
    """FastAPI dependency returning the process-wide ranking index."""
    return ranking_index
