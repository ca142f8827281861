import pathlib
import sys
from unittest.mock import MagicMock, patch

import pytest

from get_vsix.downloader import DownloadedPackage
from get_vsix.errors import SpawnError
from get_vsix.installer import install


def package_running(tmp_path: pathlib.Path, code: str) -> DownloadedPackage:
    # The interpreter happily runs a script whatever its extension.
    path = tmp_path / "ext.vsix"
    path.write_text(code)
    return DownloadedPackage(path=path, size=path.stat().st_size)


def test_install_passes_path_as_sole_argument(tmp_path) -> None:
    package = DownloadedPackage(path=tmp_path / "ext.vsix", size=0)
    with patch("subprocess.run", return_value=MagicMock(returncode=0)) as mock_run:
        assert install(package, "definitely-not-on-path-xyz") == 0

    args, kwargs = mock_run.call_args
    assert args[0] == ["definitely-not-on-path-xyz", str(tmp_path / "ext.vsix")]
    assert kwargs.get("shell") is not True


def test_install_success(tmp_path) -> None:
    package = package_running(tmp_path, "import sys; sys.exit(0)\n")
    assert install(package, sys.executable) == 0


def test_install_nonzero_exit_is_returned(tmp_path) -> None:
    package = package_running(tmp_path, "import sys; sys.exit(1)\n")
    assert install(package, sys.executable) == 1


def test_install_missing_program(tmp_path) -> None:
    package = DownloadedPackage(path=tmp_path / "ext.vsix", size=0)
    with pytest.raises(SpawnError) as exc_info:
        install(package, "definitely-not-a-real-program-xyz")
    assert exc_info.value.stage == "install"
