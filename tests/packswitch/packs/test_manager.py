# tests/packswitch/packs/test_manager.py
import pytest

from packswitch.packs.active_set import ActiveSet
from packswitch.packs.manager import PackManager
from tests.helpers import FakeMonitor, makeModDirs, makePack, treeOf


@pytest.fixture()
def manager(layout, catalog, installer) -> PackManager:
    makeModDirs(layout.modsFolder, "X", "Y")
    return PackManager(
        layout=layout,
        catalog=catalog,
        installer=installer,
        monitor=FakeMonitor(),
        activeSet=ActiveSet({"X": {"enabled": True}, "Y": {"enabled": True}}),
    )


def test_save_then_list(manager):
    result = manager.savePack("Mine", "first pack")

    assert result.ok
    assert result.data["name"] == "Mine"
    listed = manager.listPacks()
    assert listed.ok
    assert [pack["name"] for pack in listed.data] == ["Mine"]
    assert listed.data[0]["installedMods"]["mods"] == {"X": {"enabled": True}, "Y": {"enabled": True}}


def test_save_without_description_keeps_existing_one(manager):
    manager.savePack("Mine", "keep me")
    manager.savePack("Mine")

    assert manager.registry.findByName("Mine").description == "keep me"
    assert len(manager.registry) == 1


def test_save_with_reserved_name_fails_cleanly(manager, layout):
    result = manager.savePack(layout.modsFolderName)

    assert not result.ok
    assert result.errorType == "ValueError"
    assert len(manager.registry) == 0


def test_load_switches_and_reports(manager, store, layout):
    makePack(store, "Other", dirs=("Z",), mods={"Z": {}})
    manager.registry.refresh()

    result = manager.loadPack("Other")

    assert result.ok
    assert result.data["packName"] == "Other"
    assert result.data["mods"] == ("Z",)
    assert manager.activeSet.names() == ["Z"]
    assert (layout.modsFolder / "Z").is_dir()


def test_load_unknown_pack_is_structured_error(manager):
    result = manager.loadPack("Nope")

    assert not result.ok
    assert result.errorType == "PackNotFoundError"
    assert result.error["packName"] == "Nope"
    assert result.error["phase"] == "preCheck"
    assert result.toJson()["ok"] is False


def test_remove_pack(manager, store):
    manager.savePack("Mine")

    result = manager.removePack("Mine")

    assert result.ok
    assert result.data == {"name": "Mine", "entryRemoved": True, "folderRemoved": True}
    assert not store.hasPack("Mine")
    assert manager.listPacks().data == []


def test_remove_unknown_pack_is_a_noop(manager):
    result = manager.removePack("Nope")

    assert result.ok
    assert result.data == {"name": "Nope", "entryRemoved": False, "folderRemoved": False}


def test_reload_picks_up_hand_edits(manager, store):
    manager.savePack("Mine", "old")
    pack = store.loadSnapshot("Mine").model_copy(update={"description": "edited by hand"})
    store.writeManifest(pack)

    result = manager.reloadPack("Mine")

    assert result.ok
    assert manager.registry.findByName("Mine").description == "edited by hand"


def test_reload_missing_manifest_fails(manager):
    result = manager.reloadPack("Nope")

    assert not result.ok
    assert result.errorType == "ManifestParseError"


def test_active_set_read_from_live_folder(layout, catalog, installer):
    makeModDirs(layout.modsFolder, "X", "Handmade")
    makeModDirs(layout.disabledFolder, "Y")

    manager = PackManager(layout=layout, catalog=catalog, installer=installer)

    assert manager.activeSet.mods == {"X": {"enabled": True}, "Y": {"enabled": False}}
    assert manager.activeSet.notInCatalogMods == {"Handmade": {"enabled": True}}


@pytest.mark.parametrize("name", ["Mods", "Temp_Mods_Storage", "", "..", "."])
def test_remove_refuses_names_that_are_not_packs(manager, store, layout, name):
    manager.savePack("Mine")
    before = treeOf(layout.managedFolder)

    result = manager.removePack(name)

    assert not result.ok
    assert result.errorType == "ValueError"
    assert layout.modsFolder.is_dir()
    assert treeOf(layout.managedFolder) == before
    assert manager.registry.findByName("Mine") is not None


def test_reload_refuses_reserved_name(manager):
    result = manager.reloadPack("Mods")

    assert not result.ok
    assert result.errorType == "ValueError"
