from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from services.session import FormSession, build_default_session
from settings import get_settings
from storage.downloads import DownloadArtifacts, build_default_artifacts, build_strategies


@pytest.fixture
def api_client(tmp_path, monkeypatch) -> Iterator[TestClient]:
    sessions: list[FormSession] = []

    def build_test_session() -> FormSession:
        if not sessions:
            artifacts = DownloadArtifacts(build_strategies(tmp_path / "downloads"))
            sessions.append(FormSession(artifacts=artifacts))
        return sessions[0]

    def cache_clear() -> None:
        while sessions:
            sessions.pop().shutdown()

    build_test_session.cache_clear = cache_clear  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_session", build_test_session)
    monkeypatch.setattr("app.api.build_default_session", build_test_session)
    monkeypatch.setattr("app.web.build_default_session", build_test_session)

    app = create_app()
    with TestClient(app) as client:
        yield client

    cache_clear()


def test_lifespan_shuts_down_session_and_clears_cache(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("SETPOINT_DOWNLOAD_ROOT", str(tmp_path / "downloads"))
    get_settings.cache_clear()
    build_default_artifacts.cache_clear()
    build_default_session.cache_clear()
    app = create_app()

    try:
        with TestClient(app) as client:
            session_during = build_default_session()
            assert session_during.last_self_check is not None
            client.post("/form/sample")
            link = session_during.snapshot().download
            assert link is not None and link.path is not None and link.path.exists()

        assert not link.path.exists()
        session_after = build_default_session()
        assert session_after is not session_during
    finally:
        build_default_session.cache_clear()
        build_default_artifacts.cache_clear()
        get_settings.cache_clear()


def test_initial_form(api_client: TestClient) -> None:
    response = api_client.get("/form")

    assert response.status_code == 200
    body = response.json()
    assert body["system_id"] == "1"
    assert body["compact"] is True
    assert body["groups"] == [{"id": "g1", "temperature": "", "humidities": []}]
    assert body["payload"] == []
    assert body["valid"] is False
    assert body["export_ready"] is False
    assert body["json_text"] == "[]"
    assert body["download"] is None


def test_edit_and_export_flow(api_client: TestClient) -> None:
    response = api_client.put("/form/groups/g1/temperature", json={"temperature": "40.0"})
    assert response.status_code == 200

    response = api_client.post("/form/groups/g1/humidities")
    assert response.status_code == 201
    humidity_id = response.json()["groups"][0]["humidities"][0]["id"]

    response = api_client.put(f"/form/groups/g1/humidities/{humidity_id}", json={"nominal": "33.0"})
    body = response.json()
    assert body["export_ready"] is True
    assert body["payload"] == [
        [
            {"system_id": 1, "parameter": "Temperature", "nominal": 40},
            {"system_id": 1, "parameter": "Humidity", "nominal": 33},
        ]
    ]
    expected = (
        '[[{"system_id":1,"parameter":"Temperature","nominal":40},'
        '{"system_id":1,"parameter":"Humidity","nominal":33}]]'
    )
    assert body["json_text"] == expected

    export = api_client.get("/export")
    assert export.status_code == 200
    assert export.text == expected

    pretty = api_client.get("/export", params={"compact": "false"})
    assert pretty.text.startswith("[\n  [\n")

    download = api_client.get("/export/download")
    assert download.status_code == 200
    assert download.text == expected
    assert 'filename="calibration_setpoints_system_1.json"' in download.headers["content-disposition"]

    link = body["download"]
    assert link["kind"] == "file"
    artifact = api_client.get(link["href"])
    assert artifact.status_code == 200
    assert artifact.text == expected


def test_superseded_download_link_is_gone(api_client: TestClient) -> None:
    first = api_client.post("/form/sample").json()["download"]["href"]

    api_client.put("/form/system-id", json={"system_id": "7"})

    assert api_client.get(first).status_code == 404


def test_export_refused_until_ready(api_client: TestClient) -> None:
    copy = api_client.get("/export")
    download = api_client.get("/export/download")

    assert copy.status_code == 409
    assert copy.json()["detail"] == "Complete at least one valid setpoint before copying."
    assert download.status_code == 409
    assert download.json()["detail"] == "Complete at least one valid setpoint before downloading."


def test_system_id_is_clamped(api_client: TestClient) -> None:
    body = api_client.put("/form/system-id", json={"system_id": "-4"}).json()

    assert body["system_id"] == "1"


def test_quick_add_and_unknown_preset(api_client: TestClient) -> None:
    response = api_client.post("/form/groups/presets/20-60")
    assert response.status_code == 201
    group = response.json()["groups"][-1]
    assert group["temperature"] == "20.0"
    assert [entry["nominal"] for entry in group["humidities"]] == ["60.0"]

    missing = api_client.post("/form/groups/presets/99-1")
    assert missing.status_code == 404
    assert "99-1" in missing.json()["detail"]


def test_unknown_group_returns_not_found(api_client: TestClient) -> None:
    response = api_client.delete("/form/groups/nope")

    assert response.status_code == 404
    assert "nope" in response.json()["detail"]


def test_remove_and_reset(api_client: TestClient) -> None:
    sample = api_client.post("/form/sample").json()
    first_id = sample["groups"][0]["id"]
    body = api_client.delete(f"/form/groups/{first_id}").json()
    assert [group["temperature"] for group in body["groups"]] == ["0.0", "140.0", "40.0"]

    body = api_client.post("/form/reset").json()
    assert len(body["groups"]) == 1
    assert body["export_ready"] is False


def test_self_checks_endpoint(api_client: TestClient) -> None:
    response = api_client.post("/self-checks")

    assert response.status_code == 200
    assert response.json() == {
        "status": "passed",
        "passed": 6,
        "total": 6,
        "message": "Self-checks passed (6/6).",
    }


def test_ui_page_renders(api_client: TestClient) -> None:
    api_client.post("/form/sample")

    response = api_client.get("/ui")

    assert response.status_code == 200
    assert "Calibration JSON Setpoint Builder" in response.text
    assert "Self-checks passed (6/6)." in response.text
    assert "Valid - ready to export" in response.text
    assert 'download="calibration_setpoints_system_1.json"' in response.text


def test_health(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}
