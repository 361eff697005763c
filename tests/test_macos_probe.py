from __future__ import annotations

import pytest

from gauge_agent.collectors.platform.macos import MacOSProbe

from .helpers.fakes import FakeRunner, macos_runner


def test_cpu_from_last_top_sample_and_sysctl_loadavg(store, test_logger):
    sample = MacOSProbe(store, logger=test_logger, runner=macos_runner()).load_cpu()

    assert sample["cpu.user"] == 5.0
    assert sample["cpu.system"] == 10.0
    assert sample["cpu.idle"] == 85.0
    assert sample["cpu.in_use"] == pytest.approx(15.0)
    assert (sample["cpu.load_1min"], sample["cpu.load_5min"], sample["cpu.load_15min"]) == (1.53, 1.71, 1.84)


def test_memory_from_vm_stat_pages(store, test_logger):
    sample = MacOSProbe(store, logger=test_logger, runner=macos_runner()).load_memory()

    # free + inactive + speculative = 102400 pages, active + wired + compressor = 204800 pages
    assert sample["memory.free_mb"] == pytest.approx(400.0)
    assert sample["memory.used_mb"] == pytest.approx(800.0)
    assert sample["memory.total_mb"] == pytest.approx(1200.0)
    assert sample["memory.free_percent"] == pytest.approx(100 / 3)

    assert sample["swap.total_mb"] == 2048.0
    assert sample["swap.free_percent"] == pytest.approx(50.0)


def test_memory_total_only_counts_matched_categories(store, test_logger):
    vm_stat = (
        "Mach Virtual Memory Statistics: (page size of 16384 bytes)\n"
        "Pages free:                               1024.\n"
        "Pages active:                             3072.\n"
    )
    runner = FakeRunner(commands={"vm_stat": vm_stat})
    sample = MacOSProbe(store, logger=test_logger, runner=runner).load_memory()

    assert sample["memory.total_mb"] == pytest.approx(4096 * 16384 / 1024 / 1024)
    assert sample["memory.free_percent"] == pytest.approx(25.0)
    assert "swap.total_mb" not in sample


def test_disks_and_filesystem_with_root_alias(store, test_logger):
    probe = MacOSProbe(store, logger=test_logger, runner=macos_runner())

    disks = probe.load_disks()
    assert disks["disk.disk1s1.used_mb"] == 500
    assert disks["disk.root.used_mb"] == 500

    filesystem = probe.load_filesystem()
    assert filesystem["filesystem.root.inodes_used"] == 500000
    assert "filesystem.devfs.inodes_used" not in filesystem


def test_missing_tools_yield_empty_groups(store, test_logger):
    probe = MacOSProbe(store, logger=test_logger, runner=FakeRunner())
    assert probe.load_cpu() == {}
    assert probe.load_memory() == {}
    assert probe.load_disks() == {}
    assert probe.load_filesystem() == {}
