# perchfinder/client/__init__.py
from .cache import RecommendationCache, cache_key
from .catches_client import CatchesApiClient
from .recommendation_flow import WaterRecommendationFlow
from .requester import RecommendationRequester, RecommendationState
from .token_provider import FirebaseUserSession
