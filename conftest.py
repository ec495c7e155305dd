import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

# Ensure 'src' and 'tests' are importable without installing the package
PROJECT_ROOT = Path(__file__).resolve().parent
for extra in (PROJECT_ROOT / "src", PROJECT_ROOT / "tests"):
    if extra.exists() and str(extra) not in sys.path:
        sys.path.insert(0, str(extra))


@pytest.fixture(autouse=True)
def _isolated_config_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("SETTINGSYNC_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("SETTINGSYNC_DEBUG", raising=False)


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=4)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def make_controller(executor):
    from settingsync import MemoryConfigStore, SettingsController
    from settingsync.host import HostPlatform
    from utils import (
        GPUS,
        INTERFACES,
        ZONES,
        FakeAudio,
        FakeHardware,
        FakeNetwork,
        FakeTimezones,
        RecordingDriver,
        RecordingSink,
        fixed_clock,
    )

    def factory(store=None, **overrides):
        kwargs = dict(
            hardware=FakeHardware(GPUS),
            network=FakeNetwork(INTERFACES),
            timezones=FakeTimezones(ZONES),
            audio=FakeAudio({"OpenAl": True, "SDL2": True}),
            notifier=RecordingSink(),
            driver=RecordingDriver(),
            executor=executor,
            host=HostPlatform(),
            clock=fixed_clock,
        )
        kwargs.update(overrides)
        return SettingsController(store if store is not None else MemoryConfigStore(), **kwargs)

    return factory
