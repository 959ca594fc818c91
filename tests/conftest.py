import sys

import pytest

from packswitch.app.paths import ManagedLayout
from packswitch.mods.catalog import DictCatalog
from packswitch.packs.store import PackStore
from tests.helpers import FakeInstaller



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



# ----- Fixtures -----

@pytest.fixture()
def layout(tmp_path) -> ManagedLayout:
    managed = tmp_path / "managed"
    managed.mkdir()
    return ManagedLayout(managedFolder=managed)



@pytest.fixture()
def store(layout) -> PackStore:
    return PackStore(layout)



@pytest.fixture()
def catalog() -> DictCatalog:
    return DictCatalog.fromMapping({
        "X": [],
        "Y": [],
        "Z": [],
        "W": ["Y"],
        "A": ["B"],
        "B": ["C"],
        "C": [],
        "Broken": [],
    })



@pytest.fixture()
def installer(layout) -> FakeInstaller:
    return FakeInstaller(layout)
