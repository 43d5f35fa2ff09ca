import httpx
from typing import Any, Dict, Optional, Tuple

from config.settings import settings
from models.generate_image import GeneratedImage

class TogetherService:
    def __init__(self, api_key: str, user_supplied: bool = False, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.user_supplied = user_supplied
        self.base_url = settings.together_base_url()
        self.transport = transport

    def build_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        if settings.HELICONE_API_KEY:
            headers["Helicone-Auth"] = f"Bearer {settings.HELICONE_API_KEY}"
            headers["Helicone-Property-BYOK"] = "true" if self.user_supplied else "false"

        return headers

    def build_payload(self, prompt: str, iterative_mode: bool) -> Dict[str, Any]:
        payload = {
            "model": settings.IMAGE_MODEL,
            "prompt": prompt,
            "width": settings.IMAGE_WIDTH,
            "height": settings.IMAGE_HEIGHT,
            "steps": settings.IMAGE_STEPS,
            "n": 1,
            "response_format": "base64"
        }

        # Omitted entirely otherwise so the provider picks a random seed
        if iterative_mode:
            payload["seed"] = settings.ITERATIVE_SEED

        return payload

    async def generate_image(self, prompt: str, iterative_mode: bool) -> Tuple[bool, Optional[GeneratedImage], Optional[str]]:
        """Generate an image with Together's FLUX model and return the first result"""
        try:
            async with httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/images/generations",
                    json=self.build_payload(prompt, iterative_mode),
                    headers=self.build_headers()
                )

            if response.status_code != 200:
                return False, None, self._error_message(response)

            data = response.json().get('data') or []
            if not data:
                return False, None, "No image received from API"

            return True, GeneratedImage(**data[0]), None

        except httpx.TimeoutException:
            return False, None, "Request timeout - Together API may be slow"
        except Exception as error:
            return False, None, f"Error calling Together API: {str(error)}"

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        fallback = f"Image request failed: {response.status_code}"
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            return fallback

        if not isinstance(error_data, dict):
            return fallback

        error = error_data.get('error')
        if isinstance(error, dict):
            return error.get('message') or fallback
        if isinstance(error, str) and error:
            return error
        return error_data.get('message') or fallback
