from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from typing import Dict, Optional

from config.settings import settings
from core.cache import get_cached, set_cached, make_generation_cache_key, get_cache_stats
from models.generate_image import GenerateImageRequest, GeneratedImage, ErrorResponse, RateLimitResult, GenerateImageHealthResponse
from services.rate_limit_service import get_rate_limiter
from services.together_service import TogetherService

NO_API_KEY_ERROR = "No API key available. Please provide a Together API key."
RATE_LIMITED_ERROR = "No requests left. Please add your own API Key or try again in 24h"
GENERATION_FAILED_ERROR = "Failed to generate image"
FALLBACK_IP_ADDRESS = "0.0.0.0"

router = APIRouter(prefix="/generateImage", tags=["generate-image"])

def get_together_service(api_key: str, user_supplied: bool) -> TogetherService:
    return TogetherService(api_key, user_supplied=user_supplied)

def get_client_ip(request: Request) -> str:
    """Extract client IP from request"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip() or FALLBACK_IP_ADDRESS

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else FALLBACK_IP_ADDRESS

def rate_limit_headers(result: Optional[RateLimitResult]) -> Dict[str, str]:
    if result is None:
        return {}
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset)
    }

def error_response(message: str, status_code: int, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers
    )

@router.post("", response_model=GeneratedImage, response_model_exclude_none=True)
async def generate_image(generate_request: GenerateImageRequest, request: Request):
    """Generate an image from a prompt with Together's FLUX model"""
    try:
        user_api_key = generate_request.userAPIKey or None
        api_key = user_api_key or settings.TOGETHER_API_KEY
        if not api_key:
            return error_response(NO_API_KEY_ERROR, 400)

        # Only requests spending the server's own key are counted
        limit_result = None
        rate_limiter = get_rate_limiter()
        if rate_limiter and not user_api_key:
            limit_result = await rate_limiter.limit(get_client_ip(request))
            if not limit_result.success:
                return error_response(RATE_LIMITED_ERROR, 429, rate_limit_headers(limit_result))

        print(f"Generating image with prompt: {generate_request.prompt}")

        # Seeded results are shared only between server-key requests; a user key
        # must always reach the provider so a bad key still fails there
        cache_key = None
        if generate_request.iterativeMode and not user_api_key:
            cache_key = make_generation_cache_key(
                generate_request.prompt,
                settings.IMAGE_MODEL,
                settings.IMAGE_WIDTH,
                settings.IMAGE_HEIGHT,
                settings.IMAGE_STEPS,
                settings.ITERATIVE_SEED
            )
            cached_image = get_cached(cache_key)
            if cached_image is not None:
                return JSONResponse(
                    content=cached_image.model_dump(exclude_none=True),
                    headers=rate_limit_headers(limit_result)
                )

        together_service = get_together_service(api_key, user_supplied=bool(user_api_key))
        success, image, error = await together_service.generate_image(
            generate_request.prompt,
            generate_request.iterativeMode
        )

        if not success or image is None:
            print(f"Error generating image: {error}")
            return error_response(error or GENERATION_FAILED_ERROR, 500, rate_limit_headers(limit_result))

        if cache_key:
            set_cached(cache_key, image)

        print("Image generated successfully")
        return JSONResponse(
            content=image.model_dump(exclude_none=True),
            headers=rate_limit_headers(limit_result)
        )

    except Exception as e:
        print(f"Error generating image: {e}")
        return error_response(str(e) or GENERATION_FAILED_ERROR, 500)

@router.get("/health", response_model=GenerateImageHealthResponse)
async def check_together_config():
    """Check if a default Together API key is configured"""
    has_key = bool(settings.TOGETHER_API_KEY)

    return GenerateImageHealthResponse(
        configured=has_key,
        helicone=bool(settings.HELICONE_API_KEY),
        rate_limit_backend=settings.rate_limit_backend(),
        generation_cache=get_cache_stats(),
        message="Together API key configured" if has_key else "Together API key not set; requests must supply userAPIKey"
    )
