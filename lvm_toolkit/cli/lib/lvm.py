"""
LVM command line construction.

Every ``build_*`` function maps validated tool arguments to the exact lvm2
invocation(s). They are pure: no I/O, and identical arguments always give
identical token sequences. Flags are emitted only for fields the caller
supplied, and positional operands always come last.
"""

import logging
import os
import shlex
from dataclasses import dataclass
from typing import List, Optional, Tuple

from lvm_toolkit.cli.lib.schemas import (DEFAULT_LVM_CONF_PATH, CacheCreateArgs, CacheType, ConfReadArgs,
                                         ConfWriteArgs, ListSnapshotsArgs, LvChangeArgs, LvCreateArgs,
                                         LvDisplayArgs, LvExtendArgs, LvReduceArgs, LvRemoveArgs, LvType,
                                         PvCreateArgs, PvDisplayArgs, PvRemoveArgs, RaidRecoveryRateArgs,
                                         RaidScrubArgs, ReportArgs, SnapshotCreateArgs, SnapshotRemoveArgs,
                                         SplitCacheArgs, ThinPoolCreateArgs, VgCreateArgs, VgDisplayArgs,
                                         VgExtendArgs, VgRemoveArgs)
from lvm_toolkit.cli.lib.validators import split_lv_path

logger = logging.getLogger(__name__)

SNAPSHOT_REPORT_FIELDS = "lv_name,vg_name,origin,data_percent,metadata_percent"

# Fields owned by each lvcreate construction branch, in priority order.
_LVCREATE_BRANCH_FIELDS = (
    ("striped", ("stripes", "stripe_size")),
    ("mirror", ("mirrors",)),
    ("raid", ("raid_level", "region_size", "raid_integrity", "min_recovery_rate", "max_recovery_rate")),
    ("thin", ("thin_pool",)),
    ("snapshot", ("snapshot_of",)),
)


@dataclass(frozen=True)
class CommandLine:
    """A program name and its ordered argument vector."""

    program: str
    args: Tuple[str, ...] = ()
    env: Optional[Tuple[Tuple[str, str], ...]] = None

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        prefix = "".join(f"{k}={shlex.quote(v)} " for k, v in self.env or ())
        return prefix + shlex.join(self.argv)


def _cmd(program: str, args: List[str], env: Optional[dict] = None) -> CommandLine:
    return CommandLine(program, tuple(args), tuple(sorted(env.items())) if env else None)


# Logical volumes


def _lvcreate_branch(args: LvCreateArgs) -> Optional[str]:
    if args.lv_type == LvType.STRIPED and args.stripes is not None:
        return "striped"
    if args.lv_type == LvType.MIRROR and args.mirrors is not None:
        return "mirror"
    if args.lv_type.is_raid:
        return "raid"
    if args.lv_type == LvType.THIN and args.thin_pool is not None:
        return "thin"
    if args.snapshot_of is not None:
        return "snapshot"
    if args.lv_type == LvType.THIN_POOL:
        return "thin-pool"
    return None


def _warn_ignored_fields(args: LvCreateArgs, branch: Optional[str]) -> None:
    ignored = []
    for name, fields in _LVCREATE_BRANCH_FIELDS:
        if name == branch:
            continue
        ignored.extend(f for f in fields if getattr(args, f) is not None)
    # chunk_size is shared by the thin, snapshot and thin-pool branches
    if args.chunk_size is not None and branch not in ("thin", "snapshot", "thin-pool"):
        ignored.append("chunk_size")
    if ignored:
        logger.warning(
            "lvcreate %s/%s: ignoring %s (lvType=%s, branch=%s)",
            args.vg_name,
            args.lv_name,
            ", ".join(ignored),
            args.lv_type.value,
            branch or "none",
        )


def build_lvcreate(args: LvCreateArgs) -> List[CommandLine]:
    branch = _lvcreate_branch(args)
    _warn_ignored_fields(args, branch)

    # Thin LVs take a virtual size (-V) from the existing pool named by --thinpool.
    # "-L size -T vg/pool" would create a new thin pool instead.
    size_flag = "-V" if branch == "thin" else "-L"
    cmd = [size_flag, args.size, "-n", args.lv_name]

    if branch == "striped":
        cmd += ["-i", str(args.stripes)]
        if args.stripe_size is not None:
            cmd += ["-I", args.stripe_size]
    elif branch == "mirror":
        cmd += ["-m", str(args.mirrors)]
    elif branch == "raid":
        raid_type = f"raid{args.raid_level}" if args.raid_level is not None else args.lv_type.value
        cmd += ["--type", raid_type]
        if args.region_size is not None:
            cmd += ["-R", args.region_size]
        if args.raid_integrity:
            cmd += ["--raidintegrity", "y"]
        if args.min_recovery_rate is not None:
            cmd += ["--minrecoveryrate", args.min_recovery_rate]
        if args.max_recovery_rate is not None:
            cmd += ["--maxrecoveryrate", args.max_recovery_rate]
    elif branch == "thin":
        cmd += ["--thinpool", args.thin_pool]
        if args.chunk_size is not None:
            cmd += ["-c", args.chunk_size]
    elif branch == "snapshot":
        cmd += ["-s", f"/dev/{args.vg_name}/{args.snapshot_of}"]
        if args.chunk_size is not None:
            cmd += ["-c", args.chunk_size]
    elif branch == "thin-pool":
        cmd += ["-T"]
        if args.chunk_size is not None:
            cmd += ["-c", args.chunk_size]

    if args.filesystem is not None:
        cmd += ["--filesystem", args.filesystem]

    for tag in args.tags or ():
        cmd += ["--addtag", tag]

    if args.contiguous:
        cmd += ["-C", "y"]

    if args.permission is not None:
        cmd += ["-p", args.permission.value]

    if args.alloc_policy is not None:
        cmd += ["--alloc", args.alloc_policy.value]

    if args.write_mostly is not None:
        cmd += ["--write-mostly", args.write_mostly.value]

    cmd.append(args.vg_name)
    return [_cmd("lvcreate", cmd)]


def build_lvextend(args: LvExtendArgs) -> List[CommandLine]:
    cmd = []
    if args.resize_fs:
        cmd.append("-r")

    # Exact size wins over a delta, a delta over a percentage
    if args.size is not None:
        cmd += ["-L", args.size]
    elif args.size_add is not None:
        delta = args.size_add if args.size_add.startswith("+") else f"+{args.size_add}"
        cmd += ["-L", delta]
    else:
        cmd += ["-l", f"{args.size_percent}%VG"]

    cmd.append(args.lv_path)
    return [_cmd("lvextend", cmd)]


def build_lvreduce(args: LvReduceArgs) -> List[CommandLine]:
    cmd = ["-r"] if args.resize_fs else []
    cmd += ["-L", args.size, args.lv_path]
    return [_cmd("lvreduce", cmd)]


def build_lvremove(args: LvRemoveArgs) -> List[CommandLine]:
    cmd = ["-f"] if args.force else []
    cmd.append(args.lv_path)
    return [_cmd("lvremove", cmd)]


def build_lvchange(args: LvChangeArgs) -> List[CommandLine]:
    cmd = []
    if args.activate is not None:
        cmd += ["-a", "y" if args.activate else "n"]
    if args.permission is not None:
        cmd += ["-p", args.permission.value]
    if args.add_tag is not None:
        cmd += ["--addtag", args.add_tag]
    if args.del_tag is not None:
        cmd += ["--deltag", args.del_tag]
    cmd.append(args.lv_path)
    return [_cmd("lvchange", cmd)]


def build_lvdisplay(args: LvDisplayArgs) -> List[CommandLine]:
    cmd = ["-c"]
    if args.lv_path is not None:
        cmd.append(args.lv_path)
    return [_cmd("lvdisplay", cmd)]


def _build_report(program: str, args: ReportArgs) -> List[CommandLine]:
    return [_cmd(program, shlex.split(args.options) if args.options else [])]


def build_lvs(args: ReportArgs) -> List[CommandLine]:
    return _build_report("lvs", args)


# Volume groups


def build_vgcreate(args: VgCreateArgs) -> List[CommandLine]:
    cmd = ["-f"] if args.force else []
    if args.max_pv is not None:
        cmd += ["-p", str(args.max_pv)]
    if args.max_lv is not None:
        cmd += ["-l", str(args.max_lv)]
    if args.extent_size is not None:
        cmd += ["-s", args.extent_size]
    cmd += [args.vg_name, *args.physical_volumes]
    return [_cmd("vgcreate", cmd)]


def build_vgextend(args: VgExtendArgs) -> List[CommandLine]:
    return [_cmd("vgextend", [args.vg_name, *args.physical_volumes])]


def build_vgremove(args: VgRemoveArgs) -> List[CommandLine]:
    cmd = ["-f"] if args.force else []
    cmd.append(args.vg_name)
    return [_cmd("vgremove", cmd)]


def build_vgdisplay(args: VgDisplayArgs) -> List[CommandLine]:
    cmd = ["-c"]
    if args.vg_name is not None:
        cmd.append(args.vg_name)
    return [_cmd("vgdisplay", cmd)]


def build_vgs(args: ReportArgs) -> List[CommandLine]:
    return _build_report("vgs", args)


# Physical volumes


def build_pvcreate(args: PvCreateArgs) -> List[CommandLine]:
    cmd = ["-f"] if args.force else []
    if args.data_alignment is not None:
        cmd += ["--dataalignment", f"{args.data_alignment}K"]
    if args.metadata_size is not None:
        cmd += ["--metadatasize", f"{args.metadata_size}K"]
    if args.metadatacopies is not None:
        cmd += ["--pvmetadatacopies", str(args.metadatacopies)]
    cmd.append(args.device)
    return [_cmd("pvcreate", cmd)]


def build_pvremove(args: PvRemoveArgs) -> List[CommandLine]:
    cmd = ["-f"] if args.force else []
    cmd.append(args.pv_name)
    return [_cmd("pvremove", cmd)]


def build_pvdisplay(args: PvDisplayArgs) -> List[CommandLine]:
    cmd = ["-c"]
    if args.pv_name is not None:
        cmd.append(args.pv_name)
    return [_cmd("pvdisplay", cmd)]


def build_pvs(args: ReportArgs) -> List[CommandLine]:
    return _build_report("pvs", args)


# Caching


def cache_pool_ref(origin: str) -> str:
    """
    Name of the cache pool created for an origin LV.

    "/dev/vg0/slow" -> "vg0/slow_cache_pool"
    """
    vg_name, lv_name = split_lv_path(origin)
    pool = f"{lv_name}_cache_pool"
    return f"{vg_name}/{pool}" if vg_name else pool


def build_cache_create(args: CacheCreateArgs) -> List[CommandLine]:
    """
    Build the command sequence attaching a cache to ``args.origin``.

    dm-writecache is a single lvconvert. dm-cache needs a pool on the fast
    devices first unless ``cachePool`` names an existing one, so the
    result holds the pool creation followed by the attach.
    """
    if args.cache_type == CacheType.WRITECACHE:
        cmd = ["--type", "writecache"]
        if args.block_size is not None:
            cmd += ["--cachesettings", f"block_size={args.block_size}"]
        cmd += ["--cachevol", args.fast_pvs[0], args.origin]
        return [_cmd("lvconvert", cmd)]

    commands = []
    pool = args.cache_pool
    if pool is None:
        pool = cache_pool_ref(args.origin)
        commands.append(_cmd("lvcreate", ["-L", args.pool_size, "-T", pool, *args.fast_pvs]))

    cmd = ["--type", "cache", "--cachepool", pool]
    if args.cache_mode is not None:
        cmd += ["--cachemode", args.cache_mode.value]
    if args.block_size is not None:
        cmd += ["--chunksize", args.block_size]
    cmd.append(args.origin)
    commands.append(_cmd("lvconvert", cmd))
    return commands


def build_splitcache(args: SplitCacheArgs) -> List[CommandLine]:
    cmd = ["--splitcache"]
    if args.force:
        cmd.append("--yes")
    cmd.append(args.lv_path)
    return [_cmd("lvconvert", cmd)]


# RAID


def build_raidscrub(args: RaidScrubArgs) -> List[CommandLine]:
    return [_cmd("lvchange", ["--syncaction", args.syncaction.value, args.lv_path])]


def build_setraidrecoveryrate(args: RaidRecoveryRateArgs) -> List[CommandLine]:
    cmd = []
    if args.min_recovery_rate is not None:
        cmd += ["--minrecoveryrate", args.min_recovery_rate]
    if args.max_recovery_rate is not None:
        cmd += ["--maxrecoveryrate", args.max_recovery_rate]
    cmd.append(args.lv_path)
    return [_cmd("lvchange", cmd)]


# Snapshots and thin provisioning


def build_snapshot_create(args: SnapshotCreateArgs) -> List[CommandLine]:
    cmd = ["-s", "-n", args.snapshot_name]
    # Thin snapshots share the origin's pool and take no size
    if not args.thin:
        cmd += ["-L", args.size]
    if args.chunk_size is not None:
        cmd += ["-c", args.chunk_size]
    cmd.append(args.source_lv_path)
    return [_cmd("lvcreate", cmd)]


def build_listsnapshots(args: ListSnapshotsArgs) -> List[CommandLine]:
    cmd = ["-o", SNAPSHOT_REPORT_FIELDS]
    if args.vg_name is not None:
        cmd += ["-S", f"vg_name={args.vg_name}"]
    cmd += ["-S", "origin!=''"]
    return [_cmd("lvs", cmd)]


def build_removesnapshot(args: SnapshotRemoveArgs) -> List[CommandLine]:
    cmd = ["-f"] if args.force else []
    cmd.append(args.snapshot_path)
    return [_cmd("lvremove", cmd)]


def build_thinpool_create(args: ThinPoolCreateArgs) -> List[CommandLine]:
    cmd = ["-T", "-L", args.size]
    if args.chunk_size is not None:
        cmd += ["-c", args.chunk_size]
    if args.metadata_size is not None:
        cmd += ["--poolmetadatasize", args.metadata_size]
    # lvm2 zeroes new pools unless told otherwise; only an explicit opt-out is passed on
    if "zero" in args.model_fields_set and not args.zero:
        cmd += ["--zero", "n"]
    cmd.append(f"{args.vg_name}/{args.pool_name}")
    return [_cmd("lvcreate", cmd)]


# Configuration


def conf_path(path: Optional[str]) -> str:
    return path or DEFAULT_LVM_CONF_PATH


def build_conf_read(args: ConfReadArgs) -> List[CommandLine]:
    cmd = []
    if args.section is not None:
        cmd.append(f"{args.section}/{args.key}" if args.key is not None else args.section)

    path = conf_path(args.path)
    env = None
    if path != DEFAULT_LVM_CONF_PATH:
        # lvmconfig loads lvm.conf from $LVM_SYSTEM_DIR
        env = {"LVM_SYSTEM_DIR": os.path.dirname(path)}
    return [_cmd("lvmconfig", cmd, env)]


def build_conf_write(args: ConfWriteArgs) -> List[CommandLine]:
    """Only the optional backup runs; the file itself is never edited."""
    if not args.backup:
        return []
    path = conf_path(args.path)
    return [_cmd("cp", [path, f"{path}.backup"])]
