from .engine import RankEngine, RankedIndex, sort_key

__all__ = ['RankEngine', 'RankedIndex', 'sort_key']
