from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class SuspensionFiltersModel(BaseModel):
    year_range: str = "all"
    length_bucket: str = "all"
    team: str = "all"


class MetaTeamsResponse(BaseModel):
    teams: List[str]


class MetaListResponse(BaseModel):
    values: List[str]


class PlayerModel(BaseModel):
    name: Optional[str] = None
    team: Optional[str] = None
    games: int
    category: str
    sub_category: str
    description: Optional[str] = None
    year: Optional[int] = None
    source: Optional[str] = None


class AggregatedGroupModel(BaseModel):
    category: str
    sub_category: str
    games: int
    count: int
    percentage: float
    games_label: str
    players: List[PlayerModel]


class GroupsResponse(BaseModel):
    groups: List[AggregatedGroupModel]
