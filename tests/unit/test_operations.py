"""
Unit tests for tool operations and the confirmation guard.
"""

import pytest

from lvm_toolkit.cli.lib import operations
from lvm_toolkit.cli.lib.executor import failure_result, success_result
from lvm_toolkit.cli.lib.guard import CONFIRM_HINT, ConfirmationPrompt
from lvm_toolkit.cli.lib.schemas import (CacheCreateArgs, ConfReadArgs, ConfWriteArgs, LvCreateArgs, LvRemoveArgs,
                                         PvRemoveArgs, ReportArgs, SnapshotRemoveArgs, VgRemoveArgs, validate_args)


class TestConfirmationGuard:
    """Tests for destructive operations."""

    DESTRUCTIVE = [
        (operations.lvremove, LvRemoveArgs, {"lvPath": "/dev/vg0/data", "force": True}, "/dev/vg0/data"),
        (operations.vgremove, VgRemoveArgs, {"vgName": "vg0"}, "VG 'vg0'"),
        (operations.pvremove, PvRemoveArgs, {"pvName": "/dev/sdb"}, "PV '/dev/sdb'"),
        (operations.removesnapshot, SnapshotRemoveArgs, {"snapshotPath": "/dev/vg0/snap1"}, "snapshot"),
    ]

    @pytest.mark.unit
    @pytest.mark.parametrize("operation,schema,arguments,target", DESTRUCTIVE)
    def test_unconfirmed_never_executes(self, recording_executor, operation, schema, arguments, target):
        result = operation(validate_args(schema, arguments), recording_executor)

        assert isinstance(result, ConfirmationPrompt)
        assert result.to_dict()["status"] == "confirm"
        assert target in result.message
        assert result.hint
        assert recording_executor.calls == []

    @pytest.mark.unit
    @pytest.mark.parametrize("operation,schema,arguments,target", DESTRUCTIVE)
    def test_confirmed_executes_once(self, recording_executor, operation, schema, arguments, target):
        result = operation(validate_args(schema, {**arguments, "confirm": True}), recording_executor)

        assert result.success is True
        assert len(recording_executor.calls) == 1

    @pytest.mark.unit
    def test_lvremove_confirm_scenario(self, recording_executor):
        args = {"lvPath": "/dev/vg0/data", "force": True}

        prompt = operations.lvremove(validate_args(LvRemoveArgs, args), recording_executor)
        assert prompt.to_dict() == {
            "status": "confirm",
            "message": "Are you sure you want to remove '/dev/vg0/data'?",
            "hint": CONFIRM_HINT,
        }

        result = operations.lvremove(validate_args(LvRemoveArgs, {**args, "confirm": True}), recording_executor)
        assert result.command == "lvremove -f /dev/vg0/data"
        assert recording_executor.commands == ["lvremove -f /dev/vg0/data"]

    @pytest.mark.unit
    def test_confirmed_failure_is_a_result(self, recording_executor):
        recording_executor.enqueue(failure_result("Logical volume vg0/data contains a filesystem in use.", 5))

        result = operations.lvremove(
            validate_args(LvRemoveArgs, {"lvPath": "/dev/vg0/data", "confirm": True}), recording_executor
        )

        assert result.success is False
        assert result.returncode == 5
        assert "in use" in result.stderr


class TestRunCommands:
    """Tests for sequential execution."""

    @pytest.mark.unit
    def test_single_command_result(self, recording_executor):
        result = operations.lvcreate(
            validate_args(LvCreateArgs, {"vgName": "vg0", "lvName": "data", "size": "10G"}), recording_executor
        )

        assert result.success is True
        assert result.stdout == "lvcreate executed successfully"
        assert result.command == "lvcreate -L 10G -n data vg0"
        assert result.to_dict() == {
            "success": True,
            "stdout": "lvcreate executed successfully",
            "stderr": "",
            "returnCode": 0,
            "command": "lvcreate -L 10G -n data vg0",
        }

    @pytest.mark.unit
    def test_cache_create_two_steps(self, recording_executor):
        args = validate_args(
            CacheCreateArgs, {"origin": "/dev/vg0/slow", "fastPvs": ["/dev/nvme0n1"], "cacheMode": "writethrough"}
        )

        result = operations.cache_create(args, recording_executor)

        assert result.success is True
        assert recording_executor.commands == [
            "lvcreate -L 1G -T vg0/slow_cache_pool /dev/nvme0n1",
            "lvconvert --type cache --cachepool vg0/slow_cache_pool --cachemode writethrough /dev/vg0/slow",
        ]
        assert result.command.startswith("lvconvert")

    @pytest.mark.unit
    def test_cache_create_stops_after_failed_pool(self, recording_executor):
        recording_executor.script(
            "lvcreate -L 1G -T vg0/slow_cache_pool /dev/nvme0n1",
            failure_result("Insufficient free space", 5),
        )
        args = validate_args(
            CacheCreateArgs, {"origin": "/dev/vg0/slow", "fastPvs": ["/dev/nvme0n1"], "cacheMode": "writeback"}
        )

        result = operations.cache_create(args, recording_executor)

        assert result.success is False
        assert result.stderr == "Insufficient free space"
        assert result.command == "lvcreate -L 1G -T vg0/slow_cache_pool /dev/nvme0n1"
        assert len(recording_executor.calls) == 1

    @pytest.mark.unit
    def test_env_passed_for_custom_conf_path(self, recording_executor):
        operations.conf_read(validate_args(ConfReadArgs, {"path": "/srv/lvm/lvm.conf"}), recording_executor)

        [call] = recording_executor.calls
        assert call.program == "lvmconfig"
        assert call.env == {"LVM_SYSTEM_DIR": "/srv/lvm"}


class TestConfWrite:
    """Tests for conf_write."""

    @pytest.mark.unit
    def test_backup_and_description(self, recording_executor):
        args = validate_args(
            ConfWriteArgs, {"section": "devices", "key": "issue_discards", "value": "1", "comment": "SSD trim"}
        )

        change = operations.conf_write(args, recording_executor)
        data = change.to_dict()

        assert recording_executor.commands == ["cp /etc/lvm/lvm.conf /etc/lvm/lvm.conf.backup"]
        assert data["success"] is True
        assert data["message"] == "Configuration update for devices.issue_discards = 1"
        assert data["path"] == "/etc/lvm/lvm.conf"
        assert data["note"] == operations.CONF_WRITE_NOTE
        assert data["comment"] == "SSD trim"
        assert data["backup"]["returnCode"] == 0

    @pytest.mark.unit
    def test_without_backup_runs_nothing(self, recording_executor):
        args = validate_args(
            ConfWriteArgs, {"section": "devices", "key": "issue_discards", "value": "1", "backup": False}
        )

        change = operations.conf_write(args, recording_executor)

        assert recording_executor.calls == []
        assert change.success is True
        assert "backup" not in change.to_dict()
        assert "comment" not in change.to_dict()

    @pytest.mark.unit
    def test_failed_backup(self, recording_executor):
        recording_executor.enqueue(failure_result("cp: cannot stat '/etc/lvm/lvm.conf'"))
        args = validate_args(ConfWriteArgs, {"section": "global", "key": "use_lvmetad", "value": "0"})

        change = operations.conf_write(args, recording_executor)

        assert change.success is False
        assert change.to_dict()["backup"]["success"] is False


@pytest.mark.unit
def test_scripted_result_takes_precedence_over_queue(recording_executor):
    recording_executor.enqueue(failure_result("queued"))
    recording_executor.script("vgs", success_result("scripted"))

    result = operations.vgs(validate_args(ReportArgs, {}), recording_executor)

    assert result.stdout == "scripted"
    assert len(recording_executor._queue) == 1
