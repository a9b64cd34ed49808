from typing import Optional
from pydantic import BaseModel, Field

class SimulateRequest(BaseModel):
    """Single battle request schema."""
    map: str
    elf_boost: int = Field(default=0, ge=0)
    max_rounds: Optional[int] = Field(default=None, ge=1)

class SearchRequest(BaseModel):
    """Boost search request schema."""
    map: str
    workers: int = Field(default=1, ge=1, le=64)
    max_boost: Optional[int] = Field(default=None, ge=0)
    max_rounds: Optional[int] = Field(default=None, ge=1)

class StartRequest(BaseModel):
    """Live battle start request schema."""
    map: str
    elf_boost: int = Field(default=0, ge=0)
    max_rounds: Optional[int] = Field(default=None, ge=1)
    tick_ms: int = Field(default=500, ge=1)
    time_compression: float = Field(default=30.0, gt=0)

class OutcomeResponse(BaseModel):
    """Battle outcome response schema."""
    rounds: int
    remaining_hp: int
    score: int
    winner: Optional[str]
    deaths: dict[str, int]

class SearchResponse(BaseModel):
    """Boost search response schema."""
    boost: int
    elf_attack_power: int
    outcome: OutcomeResponse

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: list[dict]
