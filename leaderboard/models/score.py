import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Tuple

# Unpaired UTF-16 surrogates cannot be encoded or fingerprinted
LONE_SURROGATE = re.compile('[\ud800-\udfff]')

class ScoreSubmission(BaseModel):
    """A finished game as reported by the client, range-checked field by field"""
    model_config = ConfigDict(frozen=True)

    player_name: str = Field(..., min_length=1, max_length=50, pattern=r'^[a-zA-Z0-9_-]+$')
    score: int = Field(..., ge=0, le=10000)
    rounds: int = Field(..., ge=1, le=100)
    final_progress: int = Field(..., ge=0, le=100)
    final_bugs: int = Field(..., ge=0, le=50)
    final_tech_debt: int = Field(..., ge=0, le=100)
    game_duration_seconds: int = Field(..., ge=30, le=7200)
    cards_played: Tuple[str, ...] = Field(..., min_length=1, max_length=200)

    @field_validator('player_name', mode='before')
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('cards_played')
    @classmethod
    def reject_lone_surrogates(cls, v):
        for card in v:
            if LONE_SURROGATE.search(card):
                raise ValueError('card names must be valid unicode text')
        return v
