"""
Unit tests for lvm command builders.
"""

import logging
import shlex

import pytest

from lvm_toolkit.cli.lib import lvm
from lvm_toolkit.cli.lib.schemas import (CacheCreateArgs, ConfReadArgs, ConfWriteArgs, ListSnapshotsArgs,
                                         LvChangeArgs, LvCreateArgs, LvDisplayArgs, LvExtendArgs, LvReduceArgs,
                                         LvRemoveArgs, PvCreateArgs, RaidRecoveryRateArgs, RaidScrubArgs,
                                         ReportArgs, SnapshotCreateArgs, SplitCacheArgs, ThinPoolCreateArgs,
                                         VgCreateArgs, VgDisplayArgs, VgExtendArgs, VgRemoveArgs, validate_args)


def build(builder, schema, arguments):
    return [cmd.argv for cmd in builder(validate_args(schema, arguments))]


def lvcreate(**arguments):
    base = {"vgName": "vg0", "lvName": "data", "size": "10G"}
    [argv] = build(lvm.build_lvcreate, LvCreateArgs, {**base, **arguments})
    return argv


class TestBuildLvcreate:
    """Tests for build_lvcreate function."""

    @pytest.mark.unit
    def test_linear(self):
        assert lvcreate() == ["lvcreate", "-L", "10G", "-n", "data", "vg0"]

    @pytest.mark.unit
    def test_raid5(self):
        argv = build(
            lvm.build_lvcreate,
            LvCreateArgs,
            {"vgName": "vg0", "lvName": "raid_lv", "size": "100G", "lvType": "raid5", "raidLevel": 5,
             "regionSize": "2M"},
        )[0]

        assert argv == ["lvcreate", "-L", "100G", "-n", "raid_lv", "--type", "raid5", "-R", "2M", "vg0"]
        assert argv.index("--type") < argv.index("-R")
        assert argv[-1] == "vg0"

    @pytest.mark.unit
    def test_raid_type_without_level(self):
        argv = lvcreate(lvType="raid1", raidIntegrity=True, minRecoveryRate="128KiB/s", maxRecoveryRate="2MiB/s")

        assert argv == [
            "lvcreate", "-L", "10G", "-n", "data",
            "--type", "raid1", "--raidintegrity", "y",
            "--minrecoveryrate", "128KiB/s", "--maxrecoveryrate", "2MiB/s",
            "vg0",
        ]

    @pytest.mark.unit
    def test_raid0_level_is_emitted(self):
        argv = lvcreate(lvType="raid0", raidLevel=0)

        assert argv[argv.index("--type") + 1] == "raid0"

    @pytest.mark.unit
    def test_striped(self):
        assert lvcreate(lvType="striped", stripes=4, stripeSize="64K") == [
            "lvcreate", "-L", "10G", "-n", "data", "-i", "4", "-I", "64K", "vg0",
        ]

    @pytest.mark.unit
    def test_mirror(self):
        assert lvcreate(lvType="mirror", mirrors=1) == ["lvcreate", "-L", "10G", "-n", "data", "-m", "1", "vg0"]

    @pytest.mark.unit
    def test_thin_volume_uses_virtual_size(self):
        assert lvcreate(lvType="thin", thinPool="pool", chunkSize="64K") == [
            "lvcreate", "-V", "10G", "-n", "data", "--thinpool", "pool", "-c", "64K", "vg0",
        ]

    @pytest.mark.unit
    def test_thin_volume_does_not_create_pool(self):
        argv = lvcreate(lvType="thin", thinPool="pool")

        assert "-L" not in argv
        assert "-T" not in argv
        assert argv[argv.index("--thinpool") + 1] == "pool"

    @pytest.mark.unit
    def test_snapshot_of(self):
        assert lvcreate(snapshotOf="origin", chunkSize="512K") == [
            "lvcreate", "-L", "10G", "-n", "data", "-s", "/dev/vg0/origin", "-c", "512K", "vg0",
        ]

    @pytest.mark.unit
    def test_thin_pool(self):
        assert lvcreate(lvType="thin-pool", chunkSize="256K") == [
            "lvcreate", "-L", "10G", "-n", "data", "-T", "-c", "256K", "vg0",
        ]

    @pytest.mark.unit
    def test_common_flags_order(self):
        argv = lvcreate(
            filesystem="xfs",
            tags=["prod", "db", "prod"],
            contiguous=True,
            permission="r",
            allocPolicy="cling",
            writeMostly="Y",
        )

        assert argv == [
            "lvcreate", "-L", "10G", "-n", "data",
            "--filesystem", "xfs",
            "--addtag", "prod", "--addtag", "db", "--addtag", "prod",
            "-C", "y", "-p", "r", "--alloc", "cling", "--write-mostly", "Y",
            "vg0",
        ]

    @pytest.mark.unit
    def test_false_contiguous_not_emitted(self):
        assert lvcreate(contiguous=False) == ["lvcreate", "-L", "10G", "-n", "data", "vg0"]

    @pytest.mark.unit
    def test_striped_type_without_stripes_falls_through(self):
        assert lvcreate(lvType="striped") == ["lvcreate", "-L", "10G", "-n", "data", "vg0"]

    @pytest.mark.unit
    def test_striped_wins_over_raid_fields(self, caplog):
        with caplog.at_level(logging.WARNING, logger="lvm_toolkit.cli.lib.lvm"):
            argv = lvcreate(lvType="striped", stripes=2, regionSize="2M", snapshotOf="origin", chunkSize="64K")

        assert argv == ["lvcreate", "-L", "10G", "-n", "data", "-i", "2", "vg0"]
        assert "ignoring region_size, snapshot_of, chunk_size" in caplog.text

    @pytest.mark.unit
    def test_raid_wins_over_snapshot(self):
        argv = lvcreate(lvType="raid1", snapshotOf="origin")

        assert "-s" not in argv
        assert argv[argv.index("--type") + 1] == "raid1"

    @pytest.mark.unit
    def test_thin_wins_over_snapshot(self):
        argv = lvcreate(lvType="thin", thinPool="pool", snapshotOf="origin")

        assert "-s" not in argv
        assert argv[1] == "-V"

    @pytest.mark.unit
    def test_no_warning_without_foreign_fields(self, caplog):
        with caplog.at_level(logging.WARNING, logger="lvm_toolkit.cli.lib.lvm"):
            lvcreate(lvType="raid5", raidLevel=5)

        assert caplog.records == []

    @pytest.mark.unit
    def test_deterministic(self):
        arguments = {"vgName": "vg0", "lvName": "data", "size": "10G", "lvType": "raid6", "tags": ["a", "b"],
                     "regionSize": "4M", "permission": "rw"}
        args = validate_args(LvCreateArgs, arguments)

        assert lvm.build_lvcreate(args) == lvm.build_lvcreate(args)
        assert lvm.build_lvcreate(args) == lvm.build_lvcreate(validate_args(LvCreateArgs, dict(arguments)))


class TestBuildResize:
    """Tests for lvextend and lvreduce builders."""

    @pytest.mark.unit
    def test_extend_exact_size(self):
        assert build(lvm.build_lvextend, LvExtendArgs, {"lvPath": "/dev/vg0/data", "size": "20G"}) == [
            ["lvextend", "-L", "20G", "/dev/vg0/data"]
        ]

    @pytest.mark.unit
    def test_extend_size_add_prefixed(self):
        for delta in ("5G", "+5G"):
            assert build(lvm.build_lvextend, LvExtendArgs, {"lvPath": "/dev/vg0/data", "sizeAdd": delta}) == [
                ["lvextend", "-L", "+5G", "/dev/vg0/data"]
            ]

    @pytest.mark.unit
    def test_extend_percent_with_fs(self):
        argv = build(
            lvm.build_lvextend, LvExtendArgs, {"lvPath": "/dev/vg0/data", "sizePercent": 50, "resizeFs": True}
        )

        assert argv == [["lvextend", "-r", "-l", "50%VG", "/dev/vg0/data"]]

    @pytest.mark.unit
    def test_extend_size_precedence(self):
        argv = build(
            lvm.build_lvextend, LvExtendArgs, {"lvPath": "/dev/vg0/data", "size": "20G", "sizeAdd": "+5G"}
        )

        assert argv == [["lvextend", "-L", "20G", "/dev/vg0/data"]]

    @pytest.mark.unit
    def test_reduce(self):
        argv = build(lvm.build_lvreduce, LvReduceArgs, {"lvPath": "/dev/vg0/data", "size": "5G", "resizeFs": True})

        assert argv == [["lvreduce", "-r", "-L", "5G", "/dev/vg0/data"]]

    @pytest.mark.unit
    def test_relative_sizes_pass_through(self):
        assert build(lvm.build_lvextend, LvExtendArgs, {"lvPath": "/dev/vg0/data", "size": "+10G"}) == [
            ["lvextend", "-L", "+10G", "/dev/vg0/data"]
        ]
        assert build(lvm.build_lvreduce, LvReduceArgs, {"lvPath": "/dev/vg0/data", "size": "-5G"}) == [
            ["lvreduce", "-L", "-5G", "/dev/vg0/data"]
        ]


class TestBuildSimple:
    """Tests for the single-command builders."""

    @pytest.mark.unit
    def test_lvremove(self):
        assert build(lvm.build_lvremove, LvRemoveArgs, {"lvPath": "/dev/vg0/data", "force": True}) == [
            ["lvremove", "-f", "/dev/vg0/data"]
        ]
        assert build(lvm.build_lvremove, LvRemoveArgs, {"lvPath": "/dev/vg0/data"}) == [
            ["lvremove", "/dev/vg0/data"]
        ]

    @pytest.mark.unit
    def test_lvchange(self):
        argv = build(
            lvm.build_lvchange,
            LvChangeArgs,
            {"lvPath": "/dev/vg0/data", "activate": False, "permission": "r", "addTag": "a", "delTag": "b"},
        )

        assert argv == [["lvchange", "-a", "n", "-p", "r", "--addtag", "a", "--deltag", "b", "/dev/vg0/data"]]

    @pytest.mark.unit
    def test_display_commands(self):
        assert build(lvm.build_lvdisplay, LvDisplayArgs, {}) == [["lvdisplay", "-c"]]
        assert build(lvm.build_lvdisplay, LvDisplayArgs, {"lvPath": "vg0/data"}) == [["lvdisplay", "-c", "vg0/data"]]
        assert build(lvm.build_vgdisplay, VgDisplayArgs, {"vgName": "vg0"}) == [["vgdisplay", "-c", "vg0"]]

    @pytest.mark.unit
    def test_report_options_tokenized(self):
        assert build(lvm.build_lvs, ReportArgs, {}) == [["lvs"]]
        assert build(lvm.build_vgs, ReportArgs, {"options": "-o +vg_free --units g"}) == [
            ["vgs", "-o", "+vg_free", "--units", "g"]
        ]
        assert build(lvm.build_pvs, ReportArgs, {"options": "-o 'pv_name,pv_size'"}) == [
            ["pvs", "-o", "pv_name,pv_size"]
        ]

    @pytest.mark.unit
    def test_vgcreate(self):
        argv = build(
            lvm.build_vgcreate,
            VgCreateArgs,
            {"vgName": "vg0", "physicalVolumes": ["/dev/sdb", "/dev/sdc"], "maxPv": 4, "maxLv": 16,
             "extentSize": "8M", "force": True},
        )

        assert argv == [["vgcreate", "-f", "-p", "4", "-l", "16", "-s", "8M", "vg0", "/dev/sdb", "/dev/sdc"]]

    @pytest.mark.unit
    def test_vgextend_and_vgremove(self):
        assert build(lvm.build_vgextend, VgExtendArgs, {"vgName": "vg0", "physicalVolumes": ["/dev/sdd"]}) == [
            ["vgextend", "vg0", "/dev/sdd"]
        ]
        assert build(lvm.build_vgremove, VgRemoveArgs, {"vgName": "vg0", "force": True}) == [
            ["vgremove", "-f", "vg0"]
        ]

    @pytest.mark.unit
    def test_pvcreate(self):
        argv = build(
            lvm.build_pvcreate,
            PvCreateArgs,
            {"device": "/dev/sdb", "dataAlignment": 1024, "metadataSize": 512, "metadatacopies": 0},
        )

        assert argv == [
            ["pvcreate", "--dataalignment", "1024K", "--metadatasize", "512K", "--pvmetadatacopies", "0", "/dev/sdb"]
        ]


class TestBuildCache:
    """Tests for cache builders."""

    @pytest.mark.unit
    def test_cache_pool_ref(self):
        assert lvm.cache_pool_ref("/dev/vg0/slow") == "vg0/slow_cache_pool"
        assert lvm.cache_pool_ref("vg1/data") == "vg1/data_cache_pool"
        assert lvm.cache_pool_ref("data") == "data_cache_pool"

    @pytest.mark.unit
    def test_dm_cache_creates_pool_then_attaches(self):
        argv = build(
            lvm.build_cache_create,
            CacheCreateArgs,
            {"origin": "/dev/vg0/slow", "fastPvs": ["/dev/nvme0n1"], "cacheMode": "writeback", "blockSize": "64K"},
        )

        assert argv == [
            ["lvcreate", "-L", "1G", "-T", "vg0/slow_cache_pool", "/dev/nvme0n1"],
            ["lvconvert", "--type", "cache", "--cachepool", "vg0/slow_cache_pool", "--cachemode", "writeback",
             "--chunksize", "64K", "/dev/vg0/slow"],
        ]

    @pytest.mark.unit
    def test_dm_cache_existing_pool(self):
        argv = build(lvm.build_cache_create, CacheCreateArgs, {"origin": "/dev/vg0/slow", "cachePool": "vg0/fast"})

        assert argv == [["lvconvert", "--type", "cache", "--cachepool", "vg0/fast", "/dev/vg0/slow"]]

    @pytest.mark.unit
    def test_writecache(self):
        argv = build(
            lvm.build_cache_create,
            CacheCreateArgs,
            {"origin": "/dev/vg0/slow", "fastPvs": ["vg0/fastvol"], "cacheType": "writecache", "blockSize": "4096"},
        )

        assert argv == [
            ["lvconvert", "--type", "writecache", "--cachesettings", "block_size=4096", "--cachevol", "vg0/fastvol",
             "/dev/vg0/slow"]
        ]

    @pytest.mark.unit
    def test_splitcache(self):
        assert build(lvm.build_splitcache, SplitCacheArgs, {"lvPath": "/dev/vg0/slow", "force": True}) == [
            ["lvconvert", "--splitcache", "--yes", "/dev/vg0/slow"]
        ]


class TestBuildRaid:
    """Tests for RAID maintenance builders."""

    @pytest.mark.unit
    def test_raidscrub(self):
        assert build(lvm.build_raidscrub, RaidScrubArgs, {"lvPath": "/dev/vg0/r5", "syncaction": "repair"}) == [
            ["lvchange", "--syncaction", "repair", "/dev/vg0/r5"]
        ]

    @pytest.mark.unit
    def test_recovery_rate(self):
        argv = build(
            lvm.build_setraidrecoveryrate, RaidRecoveryRateArgs, {"lvPath": "/dev/vg0/r5", "maxRecoveryRate": "2MiB/s"}
        )

        assert argv == [["lvchange", "--maxrecoveryrate", "2MiB/s", "/dev/vg0/r5"]]


class TestBuildSnapshots:
    """Tests for snapshot and thin pool builders."""

    @pytest.mark.unit
    def test_snapshot(self):
        argv = build(
            lvm.build_snapshot_create,
            SnapshotCreateArgs,
            {"snapshotName": "snap1", "sourceLvPath": "/dev/vg0/data", "size": "1G", "chunkSize": "8K"},
        )

        assert argv == [["lvcreate", "-s", "-n", "snap1", "-L", "1G", "-c", "8K", "/dev/vg0/data"]]

    @pytest.mark.unit
    def test_thin_snapshot_has_no_size(self):
        argv = build(
            lvm.build_snapshot_create,
            SnapshotCreateArgs,
            {"snapshotName": "snap1", "sourceLvPath": "/dev/vg0/thin1", "size": "1G", "thin": True},
        )

        assert argv == [["lvcreate", "-s", "-n", "snap1", "/dev/vg0/thin1"]]

    @pytest.mark.unit
    def test_listsnapshots(self):
        assert build(lvm.build_listsnapshots, ListSnapshotsArgs, {"vgName": "vg0"}) == [
            ["lvs", "-o", lvm.SNAPSHOT_REPORT_FIELDS, "-S", "vg_name=vg0", "-S", "origin!=''"]
        ]

    @pytest.mark.unit
    def test_thinpool_default_zero_not_emitted(self):
        argv = build(lvm.build_thinpool_create, ThinPoolCreateArgs, {"poolName": "pool", "vgName": "vg0",
                                                                     "size": "100G"})

        assert argv == [["lvcreate", "-T", "-L", "100G", "vg0/pool"]]

    @pytest.mark.unit
    def test_thinpool_explicit_zero_opt_out(self):
        argv = build(
            lvm.build_thinpool_create,
            ThinPoolCreateArgs,
            {"poolName": "pool", "vgName": "vg0", "size": "100G", "chunkSize": "64K", "metadataSize": "1G",
             "zero": False},
        )

        assert argv == [
            ["lvcreate", "-T", "-L", "100G", "-c", "64K", "--poolmetadatasize", "1G", "--zero", "n", "vg0/pool"]
        ]


class TestBuildConf:
    """Tests for configuration builders."""

    @pytest.mark.unit
    def test_conf_read_full(self):
        [cmd] = lvm.build_conf_read(validate_args(ConfReadArgs, {}))

        assert cmd.argv == ["lvmconfig"]
        assert cmd.env is None

    @pytest.mark.unit
    def test_conf_read_key(self):
        [cmd] = lvm.build_conf_read(validate_args(ConfReadArgs, {"section": "devices", "key": "filter"}))

        assert cmd.argv == ["lvmconfig", "devices/filter"]

    @pytest.mark.unit
    def test_conf_read_custom_path(self):
        [cmd] = lvm.build_conf_read(
            validate_args(ConfReadArgs, {"path": "/srv/lvm/lvm.conf", "section": "global"})
        )

        assert cmd.argv == ["lvmconfig", "global"]
        assert dict(cmd.env) == {"LVM_SYSTEM_DIR": "/srv/lvm"}
        assert str(cmd) == "LVM_SYSTEM_DIR=/srv/lvm lvmconfig global"

    @pytest.mark.unit
    def test_conf_write_backup(self):
        args = validate_args(ConfWriteArgs, {"section": "devices", "key": "issue_discards", "value": "1"})

        assert [cmd.argv for cmd in lvm.build_conf_write(args)] == [
            ["cp", "/etc/lvm/lvm.conf", "/etc/lvm/lvm.conf.backup"]
        ]

    @pytest.mark.unit
    def test_conf_write_no_backup(self):
        args = validate_args(
            ConfWriteArgs, {"section": "devices", "key": "issue_discards", "value": "1", "backup": False}
        )

        assert lvm.build_conf_write(args) == []


@pytest.mark.unit
def test_command_line_str_quotes():
    cmd = lvm.CommandLine("lvs", ("-S", "origin!=''"))

    assert shlex.split(str(cmd)) == ["lvs", "-S", "origin!=''"]

