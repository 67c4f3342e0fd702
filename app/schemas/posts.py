from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class ProjectDetails(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    price: float = Field(ge=0)
    location: str = Field(min_length=1, max_length=500)
    features: List[str] = []


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    project_details: ProjectDetails = Field(alias="projectDetails")
    use_ai_image: bool = Field(default=False, alias="useAiImage")
    use_ai_video: bool = Field(default=False, alias="useAiVideo")
    use_ai_text: bool = Field(default=False, alias="useAiText")
    ai_prompt_override: Optional[str] = Field(default=None, max_length=1000, alias="aiPromptOverride")

    class Config:
        populate_by_name = True


class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    project_details: Optional[ProjectDetails] = Field(default=None, alias="projectDetails")
    use_ai_image: Optional[bool] = Field(default=None, alias="useAiImage")
    use_ai_video: Optional[bool] = Field(default=None, alias="useAiVideo")
    use_ai_text: Optional[bool] = Field(default=None, alias="useAiText")
    ai_prompt_override: Optional[str] = Field(default=None, max_length=1000, alias="aiPromptOverride")

    @field_validator("title", "project_details", "use_ai_image", "use_ai_video", "use_ai_text")
    @classmethod
    def reject_null(cls, v):
        # omitted is fine, an explicit null is not
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    class Config:
        populate_by_name = True


class AssetReorder(BaseModel):
    asset_ids: List[int] = Field(alias="assetIds", min_length=1)

    class Config:
        populate_by_name = True
