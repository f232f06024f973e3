from .encoded_image import EncodedImage
from .inventory import InventoryItem
from .recommendation import OutfitRecommendation, ToteBagRecommendation
from .payloads import (
    ImageRequest,
    ImageResponse,
    OutfitRecommendationRequest,
    ToteBagDesignRequest,
)

__all__ = [
    "EncodedImage",
    "InventoryItem",
    "OutfitRecommendation",
    "ToteBagRecommendation",
    "ImageRequest",
    "ImageResponse",
    "OutfitRecommendationRequest",
    "ToteBagDesignRequest",
]
