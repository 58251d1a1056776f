# services/gateway.py
import logging
from typing import Any, Optional

from openai import OpenAI

from config import Settings
from schemas import AnalyzeResponse
from services.ark_client import call_model, make_client, upstream_error_message
from services.normalizer import normalize_message

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "Server is missing ARK_API_KEY configuration"


class GatewayError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AnalysisGateway:
    """Validates an analyze request, makes the single upstream call and normalizes the reply."""

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        self.settings = settings
        self._client = client

    @property
    def too_few_message(self) -> str:
        return f"Please upload at least {self.settings.min_images} images for analysis"

    def client(self) -> OpenAI:
        if self._client is None:
            self._client = make_client(self.settings)
        return self._client

    def analyze(self, images: Any) -> AnalyzeResponse:
        if not self.settings.api_key:
            logger.error("analyze.rejected reason=missing_api_key")
            raise GatewayError(500, MISSING_KEY_MESSAGE)

        if not isinstance(images, list) or len(images) < self.settings.min_images:
            count = len(images) if isinstance(images, list) else 0
            logger.info("analyze.rejected reason=too_few_images images=%d", count)
            raise GatewayError(400, self.too_few_message)

        # keep the request body bounded
        limited = images[: self.settings.max_images]
        logger.info(
            "analyze.request images=%d forwarded=%d model=%s",
            len(images),
            len(limited),
            self.settings.model,
        )

        try:
            message = call_model(self.client(), self.settings, limited)
        except Exception as e:
            logger.error("analyze.upstream_failed error=%s", e, exc_info=True)
            raise GatewayError(500, upstream_error_message(e))

        result = normalize_message(message)
        logger.info(
            "analyze.response raw_chars=%d structured=%s",
            len(result.raw),
            result.data is not None,
        )
        return AnalyzeResponse(success=True, raw=result.raw, data=result.data)
