import io
import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from get_vsix.marketplace import CandidateExtension


def make_response(
    body: Any = None,
    status_code: int = 200,
    raw: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """Build a real ``requests.Response`` without touching the network."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = "OK" if status_code < 400 else "Error"
    resp.url = "https://example.invalid/"
    if headers:
        resp.headers.update(headers)
    if raw is not None:
        resp.raw = io.BytesIO(raw)
    else:
        resp._content = body if isinstance(body, bytes) else json.dumps(body).encode()
    return resp


def make_extension(
    name: str,
    publisher: str = "ms-python",
    version: str = "1.0.0",
    display_name: Optional[str] = None,
    target_platform: Optional[str] = None,
    extra_versions: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    source = (
        f"https://{publisher}.gallery.vsassets.io/_apis/public/gallery/publisher/"
        f"{publisher}/extension/{name}/{version}/assetbyname/"
        "Microsoft.VisualStudio.Services.VSIXPackage"
    )
    version_entry: Dict[str, Any] = {
        "version": version,
        "flags": "validated",
        "lastUpdated": "2024-05-01T10:00:00.000Z",
        "files": [
            {
                "assetType": "Microsoft.VisualStudio.Code.Manifest",
                "source": source.replace("VSIXPackage", "Manifest"),
            },
            {
                "assetType": "Microsoft.VisualStudio.Services.VSIXPackage",
                "source": source,
            },
        ],
        "properties": [],
        "assetUri": "https://example.invalid/asset",
        "fallbackAssetUri": "https://example.invalid/fallback",
    }
    if target_platform is not None:
        version_entry["targetPlatform"] = target_platform
    return {
        "publisher": {
            "publisherId": "00000000",
            "publisherName": publisher,
            "displayName": publisher,
            "flags": "verified",
        },
        "extensionId": f"id-{name}",
        "extensionName": name,
        "displayName": display_name or name.title(),
        "flags": "validated, public",
        "lastUpdated": "2024-05-01T10:00:00.000Z",
        "publishedDate": "2016-01-19T15:03:11.337Z",
        "releaseDate": "2016-01-19T15:03:11.337Z",
        "shortDescription": f"{name} support",
        "versions": (extra_versions or []) + [version_entry],
        "statistics": [{"statisticName": "install", "value": 1}],
    }


def make_body(*extensions: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "results": [
            {
                "extensions": list(extensions),
                "pagingToken": None,
                "resultMetadata": [],
            }
        ]
    }


@pytest.fixture
def candidates() -> List[CandidateExtension]:
    return [
        CandidateExtension(
            identifier=f"pub.ext{i}",
            display_name=f"Extension {i}",
            publisher="pub",
            version=f"1.{i}.0",
            download_url=f"https://example.invalid/ext{i}.vsix",
            name=f"ext{i}",
        )
        for i in range(8)
    ]


@pytest.fixture(name="make_response")
def make_response_fixture():
    return make_response


@pytest.fixture(name="make_extension")
def make_extension_fixture():
    return make_extension


@pytest.fixture(name="make_body")
def make_body_fixture():
    return make_body
