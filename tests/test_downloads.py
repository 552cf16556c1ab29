from __future__ import annotations

from pathlib import Path

from storage.downloads import (
    DataUriStrategy,
    DownloadArtifacts,
    TempFileStrategy,
    build_strategies,
)


class FailingStrategy:
    name = "broken"

    def __init__(self) -> None:
        self.attempts = 0

    def prepare(self, text: str, filename: str):
        self.attempts += 1
        raise OSError("disk unavailable")

    def release(self, link) -> None:
        raise AssertionError("nothing to release")


def test_file_artifact_is_written_and_replaced(tmp_path: Path) -> None:
    artifacts = DownloadArtifacts(build_strategies(tmp_path))

    first = artifacts.refresh("[1]", "calibration_setpoints_system_1.json", ready=True)
    assert first is not None and first.kind == "file" and first.path is not None
    assert first.path.read_text(encoding="utf-8") == "[1]"
    assert first.href == f"/downloads/{first.path.name}"

    second = artifacts.refresh("[2]", "calibration_setpoints_system_1.json", ready=True)
    assert second is not None and second.path is not None
    assert not first.path.exists()
    assert second.path.read_text(encoding="utf-8") == "[2]"
    assert artifacts.current == second


def test_artifact_released_when_not_ready(tmp_path: Path) -> None:
    artifacts = DownloadArtifacts(build_strategies(tmp_path))
    link = artifacts.refresh("[1]", "f.json", ready=True)
    assert link is not None and link.path is not None

    assert artifacts.refresh("[]", "f.json", ready=False) is None

    assert not link.path.exists()
    assert artifacts.current is None
    assert list(tmp_path.iterdir()) == []


def test_release_deletes_current_file(tmp_path: Path) -> None:
    artifacts = DownloadArtifacts([TempFileStrategy(tmp_path)])
    link = artifacts.refresh("[1]", "f.json", ready=True)
    assert link is not None and link.path is not None

    artifacts.release()

    assert not link.path.exists()
    assert artifacts.current is None


def test_falls_back_to_data_uri(tmp_path: Path) -> None:
    failing = FailingStrategy()
    artifacts = DownloadArtifacts([failing, DataUriStrategy()])

    link = artifacts.refresh('[{"a":1}]', "f.json", ready=True)

    assert failing.attempts == 1
    assert link is not None
    assert link.kind == "data"
    assert link.href.startswith("data:application/json;charset=utf-8,")
    assert link.path is None


def test_no_link_when_every_strategy_fails() -> None:
    artifacts = DownloadArtifacts([FailingStrategy()])

    assert artifacts.refresh("[1]", "f.json", ready=True) is None
    assert artifacts.current is None


def test_resolve_only_matches_live_file(tmp_path: Path) -> None:
    artifacts = DownloadArtifacts(build_strategies(tmp_path))
    old = artifacts.refresh("[1]", "f.json", ready=True)
    new = artifacts.refresh("[2]", "f.json", ready=True)
    assert old is not None and old.path is not None
    assert new is not None and new.path is not None

    assert artifacts.resolve(old.path.name) is None
    assert artifacts.resolve(new.path.name) == new


def test_without_root_only_data_strategy_is_used() -> None:
    strategies = build_strategies(None)

    assert [strategy.name for strategy in strategies] == ["data"]
