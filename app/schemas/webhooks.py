"""
Payloads posted back by the automation workflow.
"""
from pydantic import BaseModel, Field, HttpUrl
from typing import List, Literal, Optional
from uuid import UUID

from ..models.enums import PostStatus


class GeneratedImage(BaseModel):
    url: HttpUrl
    prompt: Optional[str] = None


class GeneratedVideo(BaseModel):
    url: HttpUrl
    prompt: Optional[str] = None
    duration: Optional[float] = Field(default=None, ge=0)
    thumbnail: Optional[HttpUrl] = None


class GeneratedContent(BaseModel):
    text: Optional[str] = None
    images: List[GeneratedImage] = []
    videos: List[GeneratedVideo] = []


class GenerationError(BaseModel):
    type: Literal["text", "image", "video"]
    message: str


class CallbackError(BaseModel):
    type: Literal["text", "image", "video", "facebook"]
    message: str


class AiContentCallback(BaseModel):
    post_id: UUID = Field(alias="postId")
    generated_content: GeneratedContent = Field(alias="generatedContent")
    status: Literal["success", "partial", "failed"]
    errors: List[GenerationError] = []

    class Config:
        populate_by_name = True


class FacebookPublishedCallback(BaseModel):
    """Field names mirror the Graph API response forwarded by the workflow."""
    post_id: UUID = Field(alias="postId")
    facebook_post_id: str = Field(alias="post_id", min_length=1)
    facebook_post_url: HttpUrl = Field(alias="post_url")
    status: Literal["success", "failed"]


class FacebookData(BaseModel):
    post_id: str = Field(alias="postId", min_length=1)
    post_url: HttpUrl = Field(alias="postUrl")
    status: Literal["success", "failed"]

    class Config:
        populate_by_name = True


class CombinedUpdateCallback(BaseModel):
    post_id: UUID = Field(alias="postId")
    generated_content: Optional[GeneratedContent] = Field(default=None, alias="generatedContent")
    facebook_data: Optional[FacebookData] = Field(default=None, alias="facebookData")
    status: Literal["success", "partial", "failed"]
    post_status: Optional[PostStatus] = Field(default=None, alias="postStatus")
    description: Optional[str] = None
    errors: List[CallbackError] = []

    class Config:
        populate_by_name = True
