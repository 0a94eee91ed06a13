from __future__ import annotations

import logging

import pytest

from conftest import FakeTransport
from modpack_installer.errors import FetchError, FilesystemError, ManifestError
from modpack_installer.lib.fetch import FetchedPayload, HttpFetcher, ModFetcher
from modpack_installer.lib.hooks import FOLDER_ENV_VAR
from modpack_installer.lib.nbt import decode, to_python
from modpack_installer.main import build_steps, run_install
from modpack_installer.manifest import Manifest, PackInfo, parse_manifest
from modpack_installer.pipeline import RunOptions


def test_step_order():
    assert [s.step_id for s in build_steps()] == [
        "00_validate_manifest",
        "05_stage_root",
        "10_start_hook",
        "20_write_servers",
        "30_stage_config",
        "35_write_splash",
        "40_stage_mods",
        "50_fetch_mods",
        "90_finish_hook",
    ]


def test_minimal_install(tmp_path, launcher):
    root = tmp_path / "minecraft"
    manifest = parse_manifest(
        {"pack": {"format": 1}, "mods": [{"url": "https://ex.com/a.jar", "name": "modA"}]}
    )
    transport = FakeTransport({"https://ex.com/a.jar": b"A-bytes"})

    result = run_install(manifest, RunOptions(str(root)), fetcher=ModFetcher(transport), launcher=launcher)

    files = sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())
    assert files == ["mods/modA.jar"]
    assert (root / "mods" / "modA.jar").read_bytes() == b"A-bytes"
    assert not (root / "servers.dat").exists()
    assert not (root / "config" / "splash.properties").exists()
    assert result.record.mods == ["modA.jar"]
    assert result.ran_steps[-1] == "90_finish_hook"


def test_full_install(tmp_path, launcher):
    root = tmp_path / "minecraft"
    manifest = parse_manifest(
        {
            "pack": {"name": "Big Pack", "format": 1},
            "servers": [{"name": "A", "ip": "1.2.3.4"}, {"name": "B", "ip": "5.6.7.8"}],
            "splash": {"enabled": "true"},
            "mods": [
                {"type": "curseforge", "projectID": 1, "fileID": 2},
                {"url": "https://ex.com/b.jar"},
            ],
            "scripts": {"start": "echo start", "finish": "echo finish"},
        }
    )
    cf = "https://minecraft.curseforge.com/projects/1/files/2/download"
    transport = FakeTransport(
        {cf: b"cf", "https://ex.com/b.jar": b"b"},
        redirects={cf: "https://media.forgecdn.net/files/2/cfmod.jar"},
    )

    run_install(manifest, RunOptions(str(root)), fetcher=ModFetcher(transport), launcher=launcher)

    name, tree = decode((root / "servers.dat").read_bytes())
    assert name == "servers"
    assert to_python(tree) == {
        "servers": [{"ip": "1.2.3.4", "name": "A"}, {"ip": "5.6.7.8", "name": "B"}]
    }

    splash = (root / "config" / "splash.properties").read_text(encoding="utf-8").splitlines()
    assert splash[0] == "# Big Pack"
    assert splash[1].startswith("# ") and splash[1].endswith(" GMT")
    assert splash[2:] == ["enabled=true"]

    assert sorted(p.name for p in (root / "mods").iterdir()) == ["b.jar.jar", "cfmod.jar.jar"]
    assert [c["command"] for c in launcher.calls] == ["echo start", "echo finish"]
    assert all(c["env"][FOLDER_ENV_VAR] == str(root.absolute()) for c in launcher.calls)


def test_mods_are_placed_before_next_fetch(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    root = tmp_path / "root"
    urls = [f"https://ex.com/m{i}.jar" for i in range(4)]
    snapshots = []
    log = logging.getLogger("tests.transport")

    class SnoopingTransport:
        def fetch_bytes(self, url):
            snapshots.append(sorted(p.name for p in (root / "mods").iterdir()))
            log.info("fetching %s", url)
            return FetchedPayload(content=url.encode(), resolved_url=url)

    manifest = parse_manifest({"pack": {"format": 1}, "mods": [{"url": u} for u in urls]})
    run_install(manifest, RunOptions(str(root), skip_hooks=True), fetcher=ModFetcher(SnoopingTransport()))

    names = [f"m{i}.jar.jar" for i in range(4)]
    assert snapshots == [sorted(names[:k]) for k in range(4)]

    events = [m for m in caplog.messages if m.startswith(("fetching", "Downloaded"))]
    expected = []
    for url, name in zip(urls, names):
        expected += [f"fetching {url}", f"Downloaded {name}."]
    assert events == expected


def test_fetch_failure_stops_remaining_mods(tmp_path, launcher):
    root = tmp_path / "root"
    transport = FakeTransport({"https://ex.com/a.jar": b"a", "https://ex.com/c.jar": b"c"})
    manifest = parse_manifest(
        {
            "pack": {"format": 1},
            "mods": [
                {"url": "https://ex.com/a.jar"},
                {"url": "https://ex.com/b.jar", "name": "bee"},
                {"url": "https://ex.com/c.jar"},
            ],
            "scripts": {"finish": "echo finish"},
        }
    )

    with pytest.raises(FetchError, match="bee"):
        run_install(manifest, RunOptions(str(root)), fetcher=ModFetcher(transport), launcher=launcher)

    assert transport.calls == ["https://ex.com/a.jar", "https://ex.com/b.jar"]
    assert [p.name for p in (root / "mods").iterdir()] == ["a.jar.jar"]
    assert launcher.calls == []


def test_invalid_manifest_fails_before_touching_disk(tmp_path, launcher):
    root = tmp_path / "root"
    manifest = Manifest(pack=PackInfo(format="one"))

    with pytest.raises(ManifestError):
        run_install(manifest, RunOptions(str(root)), fetcher=ModFetcher(FakeTransport({})), launcher=launcher)

    assert not root.exists()
    assert launcher.calls == []


def test_clean_install_resets_folders(tmp_path, launcher):
    root = tmp_path / "root"
    (root / "mods").mkdir(parents=True)
    (root / "mods" / "stale.jar").write_bytes(b"old")
    (root / "options.txt").write_text("keep?")
    manifest = parse_manifest({"pack": {"format": 1}})

    run_install(manifest, RunOptions(str(root), clean=True), fetcher=ModFetcher(FakeTransport({})), launcher=launcher)

    assert (root / "mods").is_dir()
    assert list((root / "mods").iterdir()) == []
    assert not (root / "options.txt").exists()


def test_non_clean_install_keeps_existing_mods(tmp_path, launcher):
    root = tmp_path / "root"
    (root / "mods").mkdir(parents=True)
    (root / "mods" / "extra.jar").write_bytes(b"mine")
    manifest = parse_manifest({"pack": {"format": 1}})

    run_install(manifest, RunOptions(str(root)), fetcher=ModFetcher(FakeTransport({})), launcher=launcher)

    assert (root / "mods" / "extra.jar").read_bytes() == b"mine"


def test_file_in_place_of_mods_dir_is_fatal(tmp_path, launcher):
    root = tmp_path / "root"
    root.mkdir()
    (root / "mods").write_text("oops")
    manifest = parse_manifest({"pack": {"format": 1}})

    with pytest.raises(FilesystemError):
        run_install(manifest, RunOptions(str(root)), fetcher=ModFetcher(FakeTransport({})), launcher=launcher)


def test_written_record_lists_generated_files(tmp_path, launcher):
    root = tmp_path / "root"
    manifest = parse_manifest(
        {
            "pack": {"format": 1},
            "servers": [{"name": "A", "ip": "1.2.3.4"}],
            "splash": {"enabled": "true"},
            "mods": [{"url": "https://ex.com/a.jar", "name": "modA"}],
        }
    )
    transport = FakeTransport({"https://ex.com/a.jar": b"A"})

    result = run_install(manifest, RunOptions(str(root)), fetcher=ModFetcher(transport), launcher=launcher)

    base = root.absolute()
    assert result.record.written == [
        base / "servers.dat",
        base / "config" / "splash.properties",
        base / "mods" / "modA.jar",
    ]
    assert all(p.is_file() for p in result.record.written)


@pytest.mark.parametrize("fails", [False, True])
def test_default_fetcher_session_is_closed(tmp_path, monkeypatch, fails):
    closed = []

    def fetch_bytes(self, url):
        if fails:
            raise FetchError("boom")
        return FetchedPayload(content=b"A", resolved_url=url)

    monkeypatch.setattr(HttpFetcher, "fetch_bytes", fetch_bytes)
    monkeypatch.setattr(HttpFetcher, "close", lambda self: closed.append(self))
    manifest = parse_manifest({"pack": {"format": 1}, "mods": [{"url": "https://ex.com/a.jar"}]})
    options = RunOptions(str(tmp_path / "root"), skip_hooks=True)

    if fails:
        with pytest.raises(FetchError):
            run_install(manifest, options)
    else:
        run_install(manifest, options)

    assert len(closed) == 1
