"""API endpoint tests for the map page and the layer registry endpoints.

Every request composes the map from a layer configuration written to a
temporary directory. Settings are injected using dependency overrides, so
no environment or working directory is involved. The configuration mixes
kinds that need no network access: an XYZ tile layer, a local image
overlay and a shapefile entry whose archive is missing.

See Also:
    - backend/mapviewer/api/layers.py for the registry endpoints,
    - backend/mapviewer/api/viewer.py for the map page.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from fastapi import testclient

from mapviewer import main
from mapviewer.core import config

if TYPE_CHECKING:
    import pathlib
    from collections.abc import Iterator

LAYERS = [
    {
        "type": "xyz",
        "url": "https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png",
        "name": "OpenTopo (XYZ)",
        "maxZoom": 17,
    },
    {
        "type": "image",
        "file": "overlay.png",
        "name": "Overlay PNG",
        "bounds": [[63.35, 10.25], [63.5, 10.55]],
        "visible": False,
    },
    {
        "file": "data/Missing District.zip",
        "name": "Missing District",
        "color": "#ff0000",
    },
]


def _client_for(settings: config.Settings) -> Iterator[testclient.TestClient]:
    app = main.create_app()
    app.dependency_overrides[config.get_settings] = lambda: settings
    try:
        yield testclient.TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(tmp_path: pathlib.Path) -> Iterator[testclient.TestClient]:
    layers_path = tmp_path / "layers.json"
    layers_path.write_text(json.dumps(LAYERS), encoding="utf-8")
    (tmp_path / "overlay.png").write_bytes(b"\x89PNG\r\n\x1a\nfake")
    settings = config.Settings(layer_config_path=layers_path, data_root=tmp_path)
    yield from _client_for(settings)


def test_index_renders_map(client: testclient.TestClient) -> None:
    """Test that the map page lists loaded layers and alerts failures."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    page = response.text
    assert "OpenTopo (XYZ)" in page
    assert "Overlay PNG" in page
    assert "Could not load layer: Missing District" in page


def test_list_layers(client: testclient.TestClient) -> None:
    """Test listing registered layers in configuration order."""
    response = client.get("/api/layers")
    assert response.status_code == 200
    assert response.json() == [
        {
            "name": "OpenTopo (XYZ)",
            "kind": "xyz",
            "visible": True,
            "bounds": None,
        },
        {
            "name": "Overlay PNG",
            "kind": "image",
            "visible": False,
            "bounds": [[63.35, 10.25], [63.5, 10.55]],
        },
    ]


def test_list_failures(client: testclient.TestClient) -> None:
    """Test that the failed entry is reported with its source."""
    response = client.get("/api/layers/failures")
    assert response.status_code == 200
    (failure,) = response.json()
    assert failure["name"] == "Missing District"
    assert failure["source"] == "data/Missing District.zip"
    assert failure["message"]


def test_get_layer_bounds(client: testclient.TestClient) -> None:
    """Test getting bounds for a layer with a configured extent."""
    response = client.get("/api/layers/Overlay PNG/bounds")
    assert response.status_code == 200
    assert response.json() == {"bounds": [[63.35, 10.25], [63.5, 10.55]]}


def test_get_layer_bounds_without_extent(
    client: testclient.TestClient,
) -> None:
    response = client.get("/api/layers/OpenTopo (XYZ)/bounds")
    assert response.status_code == 200
    assert response.json() == {"bounds": None}


def test_get_layer_bounds_not_found(client: testclient.TestClient) -> None:
    """Test getting bounds for a failed or unknown layer returns 404."""
    for name in ("Missing District", "nonexistent"):
        response = client.get(f"/api/layers/{name}/bounds")
        assert response.status_code == 404
        assert "not found" in response.json()["detail"].lower()


def test_unreadable_configuration(tmp_path: pathlib.Path) -> None:
    """Test that a missing configuration file is a server error."""
    settings = config.Settings(layer_config_path=tmp_path / "missing.json")
    for test_client in _client_for(settings):
        assert test_client.get("/").status_code == 500
        response = test_client.get("/api/layers")
        assert response.status_code == 500
        assert "Cannot read" in response.json()["detail"]


def test_invalid_entry_does_not_fail_the_page(tmp_path: pathlib.Path) -> None:
    """Test that one malformed entry is reported while the rest load."""
    layers_path = tmp_path / "layers.json"
    layers_path.write_text(
        json.dumps(
            [
                LAYERS[0],
                {"file": "b.zip", "name": "Broken", "weight": "heavy"},
                {**LAYERS[0], "name": "Null Visible", "visible": None},
            ]
        ),
        encoding="utf-8",
    )
    settings = config.Settings(layer_config_path=layers_path, data_root=tmp_path)

    for test_client in _client_for(settings):
        page = test_client.get("/")
        assert page.status_code == 200
        assert "Could not load layer: Broken" in page.text

        layers = test_client.get("/api/layers").json()
        assert [(layer["name"], layer["visible"]) for layer in layers] == [
            ("OpenTopo (XYZ)", True),
            ("Null Visible", True),
        ]

        (failure,) = test_client.get("/api/layers/failures").json()
        assert failure["name"] == "Broken"
        assert failure["source"] == "b.zip"


def test_each_request_composes_afresh(tmp_path: pathlib.Path) -> None:
    """Test that edits to the configuration show up on the next request."""
    layers_path = tmp_path / "layers.json"
    layers_path.write_text(json.dumps([LAYERS[0]]), encoding="utf-8")
    settings = config.Settings(layer_config_path=layers_path, data_root=tmp_path)

    for test_client in _client_for(settings):
        first = test_client.get("/api/layers").json()
        layers_path.write_text(json.dumps([]), encoding="utf-8")
        second = test_client.get("/api/layers").json()

        assert [layer["name"] for layer in first] == ["OpenTopo (XYZ)"]
        assert second == []
