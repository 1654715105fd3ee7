import asyncio
import os

import pytest
import yaml

from wow_addon_updater.core.updater import AddonUpdater
from wow_addon_updater.exceptions import (
    InstallError,
    LedgerError,
    RemoteCheckError,
    SourceNotSupportedError,
)
from wow_addon_updater.models.config import ProfileConfig, UpdaterConfig
from wow_addon_updater.storage.ledger import Profile, VersionLedger

X = "https://fake.example/x"
Y = "https://fake.example/y"
Z = "https://fake.example/z"


def make_config(tmp_path, retail=(), classic=()) -> UpdaterConfig:
    return UpdaterConfig(
        retail=ProfileConfig(path=str(tmp_path / "retail"), addons=list(retail)),
        classic=ProfileConfig(path=str(tmp_path / "classic"), addons=list(classic)),
    )


def read_ledger_file(path) -> dict:
    return yaml.safe_load(path.read_text())


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / ".versions"


async def test_first_run_creates_ledger_with_one_record(tmp_path, ledger_path, fake_source):
    source = fake_source(r"fake\.example", {X: "1.0"})
    updater = AddonUpdater(make_config(tmp_path, retail=[X]), [source], ledger_path)

    stats = await updater.update_addons()

    assert source.downloads == [(X, str(tmp_path / "retail"))]
    assert stats.addons_updated == 1
    assert read_ledger_file(ledger_path) == {
        "classic": [],
        "retail": [{"name": X, "version": "1.0"}],
    }


async def test_second_run_without_changes_downloads_nothing(
    tmp_path, ledger_path, fake_source
):
    source = fake_source(r"fake\.example", {X: "1.0", Y: "2.0"})
    config = make_config(tmp_path, retail=[X], classic=[Y])

    await AddonUpdater(config, [source], ledger_path).update_addons()
    assert len(source.downloads) == 2

    stats = await AddonUpdater(config, [source], ledger_path).update_addons()

    assert len(source.downloads) == 2
    assert stats.addons_checked == 2
    assert stats.addons_up_to_date == 2
    assert stats.addons_updated == 0


async def test_new_remote_version_is_installed(tmp_path, ledger_path, fake_source):
    source = fake_source(r"fake\.example", {X: "1.0"})
    config = make_config(tmp_path, retail=[X])
    await AddonUpdater(config, [source], ledger_path).update_addons()

    source.versions[X] = "1.1"
    stats = await AddonUpdater(config, [source], ledger_path).update_addons()

    assert len(source.downloads) == 2
    assert stats.updates[0].old_version == "1.0"
    assert stats.updates[0].new_version == "1.1"
    assert VersionLedger.load(ledger_path).get(Profile.RETAIL, X) == "1.1"


async def test_partial_failure_keeps_progress(tmp_path, ledger_path, fake_source):
    previous = VersionLedger()
    previous.set(Profile.RETAIL, Y, "0.9")
    previous.save(ledger_path)
    source = fake_source(r"fake\.example", {X: "1.0", Y: "2.0"}, failing_downloads={Y})
    updater = AddonUpdater(make_config(tmp_path, retail=[X, Y]), [source], ledger_path)

    with pytest.raises(InstallError):
        await updater.update_addons()

    ledger = VersionLedger.load(ledger_path)
    assert ledger.get(Profile.RETAIL, X) == "1.0"
    assert ledger.get(Profile.RETAIL, Y) == "0.9"


async def test_cancelled_run_keeps_progress(tmp_path, ledger_path, fake_source):
    class CancelledSource(fake_source):
        async def download(self, url, dest_dir):
            if url == Y:
                raise asyncio.CancelledError()
            await super().download(url, dest_dir)

    source = CancelledSource(r"fake\.example", {X: "1.0", Y: "2.0"})
    updater = AddonUpdater(make_config(tmp_path, retail=[X, Y]), [source], ledger_path)

    with pytest.raises(asyncio.CancelledError):
        await updater.update_addons()

    ledger = VersionLedger.load(ledger_path)
    assert ledger.get(Profile.RETAIL, X) == "1.0"
    assert (Profile.RETAIL, Y) not in ledger


async def test_first_failure_aborts_remaining_addons_and_profiles(
    tmp_path, ledger_path, fake_source
):
    source = fake_source(r"fake\.example", {X: "1", Y: "1", Z: "1"}, failing_downloads={X})
    updater = AddonUpdater(
        make_config(tmp_path, retail=[X, Y], classic=[Z]), [source], ledger_path
    )

    with pytest.raises(InstallError, match=X):
        await updater.update_addons()

    assert source.downloads == []
    assert read_ledger_file(ledger_path) == {"classic": [], "retail": []}


async def test_retail_is_processed_before_classic(tmp_path, ledger_path, fake_source):
    source = fake_source(r"fake\.example", {X: "1", Y: "1"})
    updater = AddonUpdater(
        make_config(tmp_path, retail=[Y], classic=[X]), [source], ledger_path
    )

    await updater.update_addons()

    assert source.downloads == [
        (Y, str(tmp_path / "retail")),
        (X, str(tmp_path / "classic")),
    ]


async def test_same_addon_is_tracked_per_profile(tmp_path, ledger_path, fake_source):
    source = fake_source(r"fake\.example", {X: "1"})
    config = make_config(tmp_path, retail=[X], classic=[X])

    await AddonUpdater(config, [source], ledger_path).update_addons()

    assert len(source.downloads) == 2
    ledger = VersionLedger.load(ledger_path)
    assert ledger.get(Profile.CLASSIC, X) == "1"
    assert ledger.get(Profile.RETAIL, X) == "1"


async def test_unsupported_url_aborts(tmp_path, ledger_path, fake_source):
    source = fake_source(r"fake\.example", {X: "1"})
    updater = AddonUpdater(
        make_config(tmp_path, retail=["https://unknown.example/a", X]),
        [source],
        ledger_path,
    )

    with pytest.raises(SourceNotSupportedError):
        await updater.update_addons()

    assert source.downloads == []
    assert ledger_path.exists()


async def test_check_failure_becomes_remote_check_error(
    tmp_path, ledger_path, fake_source
):
    source = fake_source(r"fake\.example", {X: "1"}, failing_checks={X})
    updater = AddonUpdater(make_config(tmp_path, retail=[X]), [source], ledger_path)

    with pytest.raises(RemoteCheckError) as exc_info:
        await updater.update_addons()

    assert exc_info.value.__cause__ is not None
    assert source.downloads == []


async def test_transport_error_during_download_becomes_install_error(
    tmp_path, ledger_path, fake_source
):
    source = fake_source(r"fake\.example", {X: "1"})

    async def broken_download(url, dest_dir):
        raise PermissionError("AddOns directory is read-only")

    source.download = broken_download
    updater = AddonUpdater(make_config(tmp_path, retail=[X]), [source], ledger_path)

    with pytest.raises(InstallError, match="read-only"):
        await updater.update_addons()

    assert VersionLedger.load(ledger_path).get(Profile.RETAIL, X) == ""


async def test_empty_remote_version_always_reinstalls(tmp_path, ledger_path, fake_source):
    source = fake_source(r"fake\.example", {X: ""})
    config = make_config(tmp_path, retail=[X])

    await AddonUpdater(config, [source], ledger_path).update_addons()
    await AddonUpdater(config, [source], ledger_path).update_addons()

    assert len(source.downloads) == 2
    assert read_ledger_file(ledger_path)["retail"] == [{"name": X, "version": ""}]


async def test_updater_does_not_close_sources(tmp_path, ledger_path, fake_source):
    source = fake_source(r"fake\.example", {X: "1"})

    await AddonUpdater(make_config(tmp_path, retail=[X]), [source], ledger_path).update_addons()

    assert source.closed is False


def test_corrupt_ledger_fails_construction(tmp_path, ledger_path, fake_source):
    ledger_path.write_text("blub")

    with pytest.raises(LedgerError):
        AddonUpdater(make_config(tmp_path), [fake_source(r"x")], ledger_path)


@pytest.mark.skipif(os.name == "nt", reason="dotfile convention")
async def test_save_failure_is_raised_after_clean_run(tmp_path, fake_source):
    source = fake_source(r"fake\.example", {X: "1"})
    updater = AddonUpdater(
        make_config(tmp_path, retail=[X]), [source], tmp_path / "versions"
    )

    with pytest.raises(LedgerError):
        await updater.update_addons()


@pytest.mark.skipif(os.name == "nt", reason="dotfile convention")
async def test_save_failure_does_not_mask_addon_error(tmp_path, fake_source):
    source = fake_source(r"fake\.example", {X: "1"}, failing_downloads={X})
    updater = AddonUpdater(
        make_config(tmp_path, retail=[X]), [source], tmp_path / "versions"
    )

    with pytest.raises(InstallError):
        await updater.update_addons()
