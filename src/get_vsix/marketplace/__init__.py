from .marketplace import (
    CandidateExtension,
    MarketplaceClient,
    build_query,
    get_target_platform,
    search,
)

__all__ = [
    "CandidateExtension",
    "MarketplaceClient",
    "build_query",
    "get_target_platform",
    "search",
]
