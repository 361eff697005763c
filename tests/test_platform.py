from __future__ import annotations

import pytest

from gauge_agent.collectors.platform import get_platform_probe
from gauge_agent.collectors.platform.linux import LinuxProbe
from gauge_agent.collectors.platform.macos import MacOSProbe
from gauge_agent.core.errors import UnsupportedPlatform

from .helpers.fakes import FakeRunner


@pytest.mark.parametrize(
    "platform, expected",
    [
        ("linux", LinuxProbe),
        ("linux2", LinuxProbe),
        ("darwin", MacOSProbe),
    ],
)
def test_probe_selected_by_platform(store, test_logger, platform, expected):
    runner = FakeRunner()
    probe = get_platform_probe(store, logger=test_logger, runner=runner, platform=platform)

    assert type(probe) is expected
    assert probe.runner is runner
    assert probe.store is store


@pytest.mark.parametrize("platform", ["win32", "freebsd13", "cygwin"])
def test_unsupported_platform(store, test_logger, platform):
    with pytest.raises(UnsupportedPlatform) as excinfo:
        get_platform_probe(store, logger=test_logger, platform=platform)

    assert platform in str(excinfo.value)
