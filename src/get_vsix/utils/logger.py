import logging
import pathlib
import sys
from typing import Optional, Union

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_ROOT_NAME = "get_vsix"


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is at emit time."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def setup_logger(
    name: str = _ROOT_NAME,
    level: int = logging.INFO,
    log_file: Optional[Union[str, pathlib.Path]] = None,
) -> logging.Logger:
    """
    Return a logger under the ``get_vsix`` hierarchy.

    Handlers live on the package root logger only, so calling this from every
    module does not duplicate output.
    """
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(level)

    if log_file is not None:
        log_path = pathlib.Path(log_file).expanduser().resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(file_handler)

    if name == _ROOT_NAME or name.startswith(_ROOT_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)


def set_log_level(level: Union[int, str]) -> None:
    if isinstance(level, str):
        level = level.upper()
    logging.getLogger(_ROOT_NAME).setLevel(level)
