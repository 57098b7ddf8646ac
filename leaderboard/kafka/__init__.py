from .publisher import ScoreEventPublisher

__all__ = ['ScoreEventPublisher']
