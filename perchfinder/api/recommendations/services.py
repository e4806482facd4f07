# perchfinder/api/recommendations/services.py
import logging
from typing import Any, Dict

from marshmallow import ValidationError

from perchfinder.api.recommendations.schemas import AdviceRequestSchema
from perchfinder.core.errors import InvalidArgument
from perchfinder.services.openai_service import OpenAIService
from perchfinder.services.rate_limit_service import RateLimitService

logger = logging.getLogger(__name__)


class AdviceService:
    """
    Turns a client's statistics payload into AI fishing advice.
    Validation and rate limiting happen before any model cost is incurred.
    """

    def __init__(self, openai_service: OpenAIService, rate_limit_service: RateLimitService,
                 function_name: str = 'getWaterRecommendation'):
        self.openai_service = openai_service
        self.rate_limit_service = rate_limit_service
        self.function_name = function_name

    @staticmethod
    def validate_request(body: Any) -> Dict[str, Any]:
        """
        Validate the raw JSON request body.

        :return: the validated `stats` payload
        :raises InvalidArgument: with marshmallow's per-field messages
        """
        if not isinstance(body, dict):
            raise InvalidArgument("Request body must be a JSON object with 'stats'.")
        try:
            return AdviceRequestSchema().load(body)['stats']
        except ValidationError as err:
            logger.warning(f"Advice payload rejected: {err.messages}")
            raise InvalidArgument("Ogiltig statistik i förfrågan.", details=err.messages)

    def generate_advice(self, uid: str, stats: Dict[str, Any]) -> str:
        """
        Count the request against the user's window, then ask the model.

        :raises RateLimited: the user's window is exhausted
        :raises UpstreamFailure: the model call failed
        """
        self.rate_limit_service.consume(self.function_name, uid)
        recommendation = self.openai_service.generate_water_advice(stats)
        logger.info(
            f"Advice generated for '{stats.get('waterName')}' "
            f"({stats.get('totalCatches')} catches, {len(recommendation)} chars)"
        )
        return recommendation
