"""
LVM tool operations.

One function per tool. Each takes validated arguments and an Executor, runs
the commands built by `lvm_toolkit.cli.lib.lvm`, and returns the
ExecutionResult of the last command that ran. Removal operations return a
ConfirmationPrompt until called with ``confirm=true``.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from lvm_toolkit.cli.lib import lvm
from lvm_toolkit.cli.lib.executor import ExecutionResult, Executor
from lvm_toolkit.cli.lib.guard import requires_confirmation
from lvm_toolkit.cli.lib.lvm import CommandLine
from lvm_toolkit.cli.lib.schemas import (CacheCreateArgs, ConfReadArgs, ConfWriteArgs, ListSnapshotsArgs,
                                         LvChangeArgs, LvCreateArgs, LvDisplayArgs, LvExtendArgs, LvReduceArgs,
                                         LvRemoveArgs, PvCreateArgs, PvDisplayArgs, PvRemoveArgs,
                                         RaidRecoveryRateArgs, RaidScrubArgs, ReportArgs, SnapshotCreateArgs,
                                         SnapshotRemoveArgs, SplitCacheArgs, ThinPoolCreateArgs, VgCreateArgs,
                                         VgDisplayArgs, VgExtendArgs, VgRemoveArgs)

logger = logging.getLogger(__name__)

CONF_WRITE_NOTE = "Direct file editing not implemented. Use sed or manual edit."


def run_commands(commands: List[CommandLine], executor: Executor) -> ExecutionResult:
    """
    Run commands in order, stopping at the first failure.

    Args:
        commands: Non-empty command sequence
        executor: Executor to run them with

    Returns:
        Result of the failed command, or of the last command if all succeeded
    """
    result = None
    for cmd in commands:
        if cmd.env:
            result = executor.execute(cmd.program, list(cmd.args), env=dict(cmd.env))
        else:
            result = executor.execute(cmd.program, list(cmd.args))
        if not result.success:
            if len(commands) > 1:
                logger.warning("Stopping after failed step: %s", result.command)
            return result
    return result


# Logical volumes


def lvcreate(args: LvCreateArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_lvcreate(args), executor)


def lvextend(args: LvExtendArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_lvextend(args), executor)


def lvreduce(args: LvReduceArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_lvreduce(args), executor)


@requires_confirmation(lambda args: f"'{args.lv_path}'")
def lvremove(args: LvRemoveArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_lvremove(args), executor)


def lvchange(args: LvChangeArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_lvchange(args), executor)


def lvdisplay(args: LvDisplayArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_lvdisplay(args), executor)


def lvs(args: ReportArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_lvs(args), executor)


# Volume groups


def vgcreate(args: VgCreateArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_vgcreate(args), executor)


def vgextend(args: VgExtendArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_vgextend(args), executor)


@requires_confirmation(lambda args: f"VG '{args.vg_name}'")
def vgremove(args: VgRemoveArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_vgremove(args), executor)


def vgdisplay(args: VgDisplayArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_vgdisplay(args), executor)


def vgs(args: ReportArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_vgs(args), executor)


# Physical volumes


def pvcreate(args: PvCreateArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_pvcreate(args), executor)


@requires_confirmation(lambda args: f"PV '{args.pv_name}'")
def pvremove(args: PvRemoveArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_pvremove(args), executor)


def pvdisplay(args: PvDisplayArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_pvdisplay(args), executor)


def pvs(args: ReportArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_pvs(args), executor)


# Caching and RAID


def cache_create(args: CacheCreateArgs, executor: Executor) -> ExecutionResult:
    """
    Attach dm-cache or dm-writecache to an origin LV.

    For dm-cache without an existing pool, the pool is created first and
    the attach only runs if that succeeded.
    """
    return run_commands(lvm.build_cache_create(args), executor)


def splitcache(args: SplitCacheArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_splitcache(args), executor)


def raidscrub(args: RaidScrubArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_raidscrub(args), executor)


def setraidrecoveryrate(args: RaidRecoveryRateArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_setraidrecoveryrate(args), executor)


# Snapshots and thin provisioning


def snapshot_create(args: SnapshotCreateArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_snapshot_create(args), executor)


def listsnapshots(args: ListSnapshotsArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_listsnapshots(args), executor)


@requires_confirmation(lambda args: f"snapshot '{args.snapshot_path}'")
def removesnapshot(args: SnapshotRemoveArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_removesnapshot(args), executor)


def thinpool_create(args: ThinPoolCreateArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_thinpool_create(args), executor)


# Configuration


@dataclass(frozen=True)
class ConfigChange:
    """Description of an intended lvm.conf change.

    Attributes:
        path: Configuration file the change targets
        section: Section name
        key: Key name
        value: New value
        comment: Optional comment supplied by the caller
        backup: Result of the backup copy, or None if no backup was requested
    """

    path: str
    section: str
    key: str
    value: str
    comment: Optional[str] = None
    backup: Optional[ExecutionResult] = None

    @property
    def success(self) -> bool:
        return self.backup is None or self.backup.success

    def to_dict(self) -> dict:
        data = {
            "success": self.success,
            "message": f"Configuration update for {self.section}.{self.key} = {self.value}",
            "path": self.path,
            "section": self.section,
            "key": self.key,
            "value": self.value,
            "note": CONF_WRITE_NOTE,
        }
        if self.comment is not None:
            data["comment"] = self.comment
        if self.backup is not None:
            data["backup"] = self.backup.to_dict()
        return data


def conf_read(args: ConfReadArgs, executor: Executor) -> ExecutionResult:
    return run_commands(lvm.build_conf_read(args), executor)


def conf_write(args: ConfWriteArgs, executor: Executor) -> ConfigChange:
    """
    Describe an lvm.conf change without editing the file.

    The optional backup copy is the only command that runs.
    """
    commands = lvm.build_conf_write(args)
    backup = run_commands(commands, executor) if commands else None
    return ConfigChange(
        path=lvm.conf_path(args.path),
        section=args.section,
        key=args.key,
        value=args.value,
        comment=args.comment,
        backup=backup,
    )
