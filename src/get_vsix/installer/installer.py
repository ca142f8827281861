import shutil
import subprocess

from get_vsix.downloader import DownloadedPackage
from get_vsix.errors import SpawnError
from get_vsix.utils.logger import setup_logger

logger = setup_logger(name=__name__)


def install(package: DownloadedPackage, program: str) -> int:
    """
    Run ``program <package path>`` and return its exit code.

    On Windows the editor CLIs ship as batch wrappers (``code.cmd``), so the
    program is resolved through PATH before it is spawned. A non-zero exit is
    returned to the caller, not raised.
    """
    executable = shutil.which(program) or program
    cmd = [executable, str(package.path)]
    logger.info("Installing with command: %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, check=False)
    except OSError as e:
        logger.debug("Couldn't run the install program %s: %s", program, e)
        raise SpawnError(
            f"Couldn't find or run the install program {program!r}"
        ) from e

    if proc.returncode != 0:
        logger.debug(
            "Install program %s exited with code %d", program, proc.returncode
        )
    return proc.returncode
