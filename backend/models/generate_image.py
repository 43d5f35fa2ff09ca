from pydantic import BaseModel, ConfigDict, StrictBool, StrictStr
from typing import Any, Dict, Optional

class GenerateImageRequest(BaseModel):
    prompt: StrictStr
    iterativeMode: StrictBool  # Fixed seed so consecutive prompts stay visually consistent
    userAPIKey: Optional[StrictStr] = None

class ImageTimings(BaseModel):
    model_config = ConfigDict(extra="allow")

    inference: float

class GeneratedImage(BaseModel):
    # Provider's data[0] item, passed through with any fields it adds
    model_config = ConfigDict(extra="allow")

    b64_json: str
    timings: Optional[ImageTimings] = None
    index: Optional[int] = None

class ErrorResponse(BaseModel):
    error: str

class RateLimitResult(BaseModel):
    success: bool
    limit: int
    remaining: int
    reset: int  # Unix seconds when the current window closes

class GenerateImageHealthResponse(BaseModel):
    configured: bool
    helicone: bool
    rate_limit_backend: Optional[str] = None
    generation_cache: Optional[Dict[str, Any]] = None
    message: str
