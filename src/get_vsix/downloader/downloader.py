import pathlib
from dataclasses import dataclass
from typing import Optional, Union

import requests
from tqdm import tqdm

from get_vsix.config import DEFAULT_TIMEOUT
from get_vsix.errors import ApiError, FileWriteError, NetworkError
from get_vsix.marketplace import CandidateExtension
from get_vsix.utils.logger import setup_logger

logger = setup_logger(name=__name__)


@dataclass(frozen=True)
class DownloadedPackage:
    path: pathlib.Path
    size: int


def format_size(size: int) -> str:
    if size // 1000 // 1000 > 0:
        return f"{size // 1000 // 1000} mb"
    if size // 1000 > 0:
        return f"{size // 1000} kb"
    return f"{size} b"


def resolve_output_path(
    candidate: CandidateExtension,
    output: Optional[Union[str, pathlib.Path]] = None,
) -> pathlib.Path:
    """
    Work out where the package is written.

    No output, or an existing directory, gets the
    ``<publisher>.<name>-<version>.vsix`` file name; anything else is taken
    as the file path itself.
    """
    if output is None:
        return (pathlib.Path.cwd() / candidate.filename).resolve()
    output_path = pathlib.Path(output).expanduser()
    if output_path.is_dir() or str(output).endswith(("/", "\\")):
        output_path = output_path / candidate.filename
    return output_path.resolve()


def download(
    candidate: CandidateExtension,
    output: Optional[Union[str, pathlib.Path]] = None,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    chunk_size: int = 8192,
    progress: bool = True,
) -> DownloadedPackage:
    """
    Stream the candidate's VSIX package to disk.

    Args:
        candidate: The selected extension.
        output: Target file or directory; see :func:`resolve_output_path`.
        session: Optional requests session to reuse.
        timeout: Connect/read timeout in seconds.
        chunk_size: Stream chunk size in bytes.
        progress: Show a progress bar on stderr.

    Returns:
        The written file and its size. An existing file is overwritten.
    """
    output_path = resolve_output_path(candidate, output)
    http = session or requests.Session()

    logger.info("Downloading %s to %s", candidate.download_url, output_path)
    try:
        resp = http.get(candidate.download_url, stream=True, timeout=timeout)
    except requests.RequestException as e:
        logger.debug("Failed to reach the download host: %s", e)
        raise NetworkError(
            f"Couldn't download {candidate.identifier}", stage="download"
        ) from e

    with resp:
        if not resp.ok:
            logger.debug("Download failed with HTTP %d", resp.status_code)
            raise ApiError(
                f"Download answered with HTTP {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
                stage="download",
            )

        try:
            total = int(resp.headers.get("Content-Length") or 0) or None
        except ValueError:
            # only sizes the progress bar
            total = None
        if total:
            logger.info("Downloading %s...", format_size(total))

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            f = output_path.open("wb")
        except OSError as e:
            logger.debug("Failed to open %s: %s", output_path, e)
            raise FileWriteError(f"Couldn't write {output_path}") from e

        written = 0
        try:
            with f, tqdm(
                desc=candidate.filename,
                total=total,
                unit="B",
                unit_scale=True,
                disable=not progress,
            ) as bar:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
                        bar.update(len(chunk))
        except OSError as e:
            logger.debug("Failed to write %s: %s", output_path, e)
            _remove_partial(output_path)
            raise FileWriteError(f"Couldn't write {output_path}") from e
        except requests.RequestException as e:
            logger.debug("Download of %s was interrupted: %s", candidate.identifier, e)
            _remove_partial(output_path)
            raise NetworkError(
                f"Download of {candidate.identifier} was interrupted",
                stage="download",
            ) from e

    logger.debug("Downloaded file size: %d bytes", written)
    return DownloadedPackage(path=output_path, size=written)


def _remove_partial(path: pathlib.Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Couldn't remove partial download %s: %s", path, e)
