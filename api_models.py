# api_models.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OwnerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    avatar: Optional[str] = None


class ChannelSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    icon: Optional[str] = None
    owner: Optional[OwnerSummary] = None


class VideoCard(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    category: str
    thumbnail: Optional[str] = None
    url: str
    duration: float
    views: int
    is_short: bool
    created_at: datetime
    channel: Optional[ChannelSummary] = None


class RecommendedFeedResponse(BaseModel):
    videos: List[VideoCard]
    shorts: List[VideoCard]


class WatchHistoryRequest(BaseModel):
    user_id: str = Field(...,
                         description="External user identifier.", min_length=1, max_length=255)
    video_id: int = Field(..., description="The watched video.")
    progress: float = Field(0.0, ge=0, description="Playback position in seconds.")
    duration: Optional[float] = Field(
        None, gt=0, description="Video length in seconds, used to detect finished videos.")


class WatchHistoryResponse(BaseModel):
    success: bool
    removed: bool = False
