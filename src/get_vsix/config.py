import pathlib
from dataclasses import dataclass
from typing import Optional, Union

from get_vsix.errors import ConfigError

DEFAULT_API_URL = (
    "https://marketplace.visualstudio.com/_apis/public/gallery/extensionquery"
)
DEFAULT_API_VERSION = "7.2-preview.1"
DEFAULT_LIMIT = 5
# seconds, applied to connect and read separately
DEFAULT_TIMEOUT = 30.0

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class GetVsixConfig:
    search: str
    api: str = DEFAULT_API_URL
    limit: Optional[int] = None
    api_version: str = DEFAULT_API_VERSION
    program: Optional[str] = None
    output: Optional[Union[str, pathlib.Path]] = None
    log_level: str = "INFO"
    log_file: Optional[Union[str, pathlib.Path]] = None

    def __post_init__(self) -> None:
        if self.search is None or not self.search.strip():
            raise ConfigError("A non-empty search term is required.")
        if self.limit is not None and (
            isinstance(self.limit, bool)
            or not isinstance(self.limit, int)
            or self.limit < 1
        ):
            raise ConfigError(
                f"Invalid limit: {self.limit!r}. Must be a positive integer."
            )
        if not self.api.strip():
            raise ConfigError("The marketplace API URL must not be empty.")
        if not self.api_version.strip():
            raise ConfigError("The API version must not be empty.")
        if self.program is not None and not self.program.strip():
            raise ConfigError("The installer program must not be empty.")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of {', '.join(LOG_LEVELS)}."
            )

    @property
    def page_size(self) -> int:
        return self.limit if self.limit is not None else DEFAULT_LIMIT
