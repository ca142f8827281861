__version__ = "0.3.0"

from .config import GetVsixConfig  # noqa: E402
from .marketplace import CandidateExtension, MarketplaceClient  # noqa: E402

__all__ = ["CandidateExtension", "GetVsixConfig", "MarketplaceClient", "__version__"]
