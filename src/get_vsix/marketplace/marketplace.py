import enum
import platform
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import requests

from get_vsix import __version__
from get_vsix.config import DEFAULT_TIMEOUT, GetVsixConfig
from get_vsix.errors import ApiError, DecodeError, NetworkError
from get_vsix.utils.logger import setup_logger

logger = setup_logger(name=__name__)

VSIX_ASSET_TYPE = "Microsoft.VisualStudio.Services.VSIXPackage"
VSCODE_TARGET = "Microsoft.VisualStudio.Code"


class FilterType(enum.IntEnum):
    # https://learn.microsoft.com/en-us/javascript/api/azure-devops-extension-api/extensionqueryfiltertype
    TAG = 1
    DISPLAY_NAME = 2
    EXTENSION_ID = 4
    NAME = 7
    TARGET = 8
    SEARCH_TEXT = 10
    EXCLUDE_WITH_FLAGS = 12


class QueryFlags(enum.IntFlag):
    NONE = 0x0
    INCLUDE_VERSIONS = 0x1
    INCLUDE_FILES = 0x2
    INCLUDE_CATEGORY_AND_TAGS = 0x4
    INCLUDE_VERSION_PROPERTIES = 0x10
    EXCLUDE_NON_VALIDATED = 0x20
    INCLUDE_ASSET_URI = 0x80
    INCLUDE_STATISTICS = 0x100
    INCLUDE_LATEST_VERSION_ONLY = 0x200
    UNPUBLISHED = 0x1000


_QUERY_FLAGS = (
    QueryFlags.INCLUDE_VERSIONS
    | QueryFlags.INCLUDE_FILES
    | QueryFlags.INCLUDE_VERSION_PROPERTIES
    | QueryFlags.EXCLUDE_NON_VALIDATED
    | QueryFlags.INCLUDE_ASSET_URI
    | QueryFlags.INCLUDE_LATEST_VERSION_ONLY
)


@dataclass(frozen=True)
class CandidateExtension:
    identifier: str
    display_name: str
    publisher: str
    version: str
    download_url: str
    name: str = ""
    short_description: str = ""
    target_platform: Optional[str] = None
    last_updated: str = ""

    @property
    def filename(self) -> str:
        return f"{self.identifier}-{self.version}.vsix"


def get_target_platform(
    system: Optional[str] = None, machine: Optional[str] = None
) -> str:
    """Return the marketplace platform tag for this host, e.g. ``linux-x64``."""
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()

    if machine in ("x86_64", "amd64"):
        arch = "x64"
    elif machine in ("aarch64", "arm64"):
        arch = "arm64"
    elif machine.startswith("armv7") or machine == "arm":
        arch = "armhf"
    elif machine in ("i386", "i686", "x86"):
        arch = "ia32"
    else:
        arch = "x64"

    if system == "windows":
        os_name = "win32"
    elif system == "darwin":
        os_name = "darwin"
    else:
        os_name = "linux"
    return f"{os_name}-{arch}"


def build_query(search: str, page_size: int) -> Dict[str, Any]:
    return {
        "filters": [
            {
                "criteria": [
                    {"filterType": int(FilterType.SEARCH_TEXT), "value": search},
                    {"filterType": int(FilterType.TARGET), "value": VSCODE_TARGET},
                    {
                        "filterType": int(FilterType.EXCLUDE_WITH_FLAGS),
                        "value": str(int(QueryFlags.UNPUBLISHED)),
                    },
                ],
                "pageNumber": 1,
                "pageSize": page_size,
            }
        ],
        "flags": int(_QUERY_FLAGS),
    }


class MarketplaceClient:
    """
    Thin client for the marketplace ``extensionquery`` endpoint.

    One call to :meth:`search` sends exactly one request; failures are raised
    as :class:`NetworkError`, :class:`ApiError` or :class:`DecodeError` and
    never retried.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        target_platform: Optional[str] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", f"get-vsix/{__version__}")
        self.timeout = timeout
        self.target_platform = target_platform or get_target_platform()

    def search(self, config: GetVsixConfig) -> List[CandidateExtension]:
        headers = {
            "Content-Type": "application/json",
            "Accept": f"application/json;api-version={config.api_version}",
        }
        payload = build_query(config.search, config.page_size)

        logger.info("Searching the marketplace for %r at %s", config.search, config.api)
        try:
            resp = self.session.post(
                config.api,
                params={"api-version": config.api_version},
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.debug("Failed to reach the marketplace: %s", e)
            raise NetworkError(f"Couldn't reach {config.api}") from e

        if not resp.ok:
            logger.debug(
                "Marketplace query failed with HTTP %d: %s",
                resp.status_code,
                resp.text[:200],
            )
            raise ApiError(
                f"Marketplace answered with HTTP {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
            )

        try:
            body = resp.json()
        except ValueError as e:
            logger.debug("Marketplace response is not valid JSON")
            raise DecodeError("The marketplace response is not valid JSON") from e

        candidates = self.parse_response(body)
        logger.debug("Marketplace returned %d candidate(s)", len(candidates))
        return candidates

    def parse_response(self, body: Any) -> List[CandidateExtension]:
        if not isinstance(body, Mapping) or not isinstance(body.get("results"), list):
            raise DecodeError("The marketplace response has no 'results' array")
        results = body["results"]
        if not results:
            return []
        first = results[0]
        if not isinstance(first, Mapping):
            raise DecodeError("The marketplace result is not an object")
        if "extensions" not in first:
            raise DecodeError("The marketplace result has no 'extensions' array")
        extensions = first["extensions"] or []
        if not isinstance(extensions, list):
            raise DecodeError("The marketplace result has no 'extensions' array")
        return [self._to_candidate(ext) for ext in extensions]

    def _pick_version(self, versions: List[Any]) -> Mapping[str, Any]:
        for version in versions:
            if (
                isinstance(version, Mapping)
                and version.get("targetPlatform") == self.target_platform
            ):
                return version
        return versions[0]

    def _to_candidate(self, extension: Any) -> CandidateExtension:
        try:
            name = extension["extensionName"]
            publisher = extension["publisher"]["publisherName"]
            versions = extension["versions"]
            if not versions:
                raise DecodeError(f"Extension {publisher}.{name} has no versions")
            version = self._pick_version(versions)
            version_str = version["version"]
            download_url = next(
                f["source"]
                for f in version.get("files") or []
                if f.get("assetType") == VSIX_ASSET_TYPE
            )
        except StopIteration as e:
            raise DecodeError("An extension in the response has no VSIX package") from e
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise DecodeError(
                "An extension in the response is missing required fields"
            ) from e

        fields = (name, publisher, version_str, download_url)
        if not all(isinstance(value, str) and value for value in fields):
            raise DecodeError(
                "An extension in the response has empty or non-string fields"
            )

        return CandidateExtension(
            identifier=f"{publisher}.{name}",
            display_name=extension.get("displayName") or name,
            publisher=publisher,
            version=version_str,
            download_url=download_url,
            name=name,
            short_description=extension.get("shortDescription") or "",
            target_platform=version.get("targetPlatform"),
            last_updated=version.get("lastUpdated")
            or extension.get("lastUpdated")
            or "",
        )


def search(
    config: GetVsixConfig, session: Optional[requests.Session] = None
) -> List[CandidateExtension]:
    return MarketplaceClient(session=session).search(config)
