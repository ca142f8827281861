from typing import Optional


class GetVsixError(Exception):
    """Base class for every failure that ends a get-vsix run."""

    stage: str = "get-vsix"

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.__cause__ is not None:
            return f"[{self.stage}] {message}: {self.__cause__}"
        return f"[{self.stage}] {message}"


class ConfigError(GetVsixError):
    stage = "config"


class NetworkError(GetVsixError):
    """The marketplace or the download host could not be reached."""

    stage = "search"


class ApiError(GetVsixError):
    stage = "search"

    def __init__(
        self, message: str, status_code: int, stage: Optional[str] = None
    ) -> None:
        super().__init__(message, stage=stage)
        self.status_code = status_code


class DecodeError(GetVsixError):
    stage = "search"


class NotFoundError(GetVsixError):
    stage = "select"


class InvalidSelectionError(GetVsixError):
    stage = "select"


class FileWriteError(GetVsixError):
    stage = "download"


class SpawnError(GetVsixError):
    stage = "install"
