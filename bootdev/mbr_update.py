# This file is part of bootdev. See LICENSE for copyright and license info.

"""Boot sector and partition activation updates for a BIOS bootloader.

Given the stage1 devices a bootloader is installed to, MBRUpdate

 * backs up the boot sectors it may touch,
 * optionally writes generic boot code to the MBR of the involved disks,
 * optionally flags one partition per disk as the active one.
"""

import attr

from bootdev import deps
from bootdev import util
from bootdev.block import DeviceNotFound
from bootdev.block import parted
from bootdev.block.boot_record_backup import BootRecordBackup
from bootdev.block.topology import (
    ID_BIOS_BOOT,
    ID_SWAP,
    PARTITION_EXTENDED,
    PARTITION_LOGICAL,
)
from bootdev.block.udev_mapping import UdevMapping
from bootdev.config import BootloaderCfg, MODES
from bootdev.log import LOG, logged_time

GPT_BOOT_FLAG = 'legacy_boot'
DOS_BOOT_FLAG = 'boot'
# only the code area, the disk signature and partition table follow it
GENERIC_MBR_CODE_SIZE = 440


class InvalidLoaderDevice(ValueError):
    pass


class InternalDataError(RuntimeError):
    pass


@attr.s(frozen=True)
class ActivationRecord(object):
    """Partition num on disk is the one to flag bootable."""
    disk = attr.ib(default=None)
    num = attr.ib(default=None)

    def empty(self):
        return self.disk is None and self.num is None


def can_activate_partition(gpt, num, arch):
    # DOS tables only have 4 primary slots, GPT has no such limit
    return not (util.is_ppc_arch(arch) and gpt) and (gpt or num <= 4)


def activatable_partitions(disk):
    """Partitions of disk that may carry the boot flag.

    Swap and the BIOS boot partition are left alone, setting a flag on the
    latter would clear its special type.
    """
    if disk is None:
        return []
    return [part for part in disk.partitions
            if part.partition_id not in (ID_SWAP, ID_BIOS_BOOT)]


def extended_partition(disk):
    for part in activatable_partitions(disk):
        if part.type == PARTITION_EXTENDED:
            LOG.info("Using extended partition instead: %s", part)
            return part
    return None


def find_mbr_disk(topology):
    """Return the disk holding /boot, or / when there is no /boot."""
    for mount_point in ('/boot', '/'):
        filesystem = topology.find_by_mount_point(mount_point)
        if filesystem is not None:
            break
    else:
        raise InvalidLoaderDevice(
            "Cannot find the disk holding /boot or / in the storage config")

    real = filesystem.volume.real_devices()[0]
    if real.is_type('partition'):
        real = real.disk
    LOG.debug("disk holding %s is %s", mount_point, real.name)
    return real.name


def _uniq(items):
    ret = []
    for item in items:
        if item not in ret:
            ret.append(item)
    return ret


class MBRUpdate(object):
    """Update contents of MBR (active partition and booting code)."""

    def __init__(self, topology, bootcfg=None, mode=MODES.normal):
        self.topology = topology
        self.cfg = bootcfg if bootcfg is not None else BootloaderCfg()
        self.mode = mode
        self.arch = self.cfg.arch or util.get_platform_arch()
        self.udev = UdevMapping(topology, mode=mode)
        self.stage1 = self.cfg.stage1
        self._mbr_disk = None
        self._records = {}
        self._disks_to_rewrite = None

    def run(self, stage1=None):
        if stage1 is not None:
            self.stage1 = stage1
        LOG.info("Stage1: %s", self.stage1)
        if self.mode == MODES.config:
            LOG.info("config mode, not touching any boot sector")
            return

        self._records = {}
        self._disks_to_rewrite = None

        self.create_backups()

        # Rewrite MBR with generic boot code only if we do not plan to
        # install there bootloader stage1
        if self.stage1.generic_mbr and not self.stage1.mbr:
            self.install_generic_mbr()

        if self.stage1.activate:
            self.activate_partitions()

    @property
    def mbr_disk(self):
        if self._mbr_disk is None:
            if self.cfg.mbr_disk:
                self._mbr_disk = self.udev.to_kernel_device(self.cfg.mbr_disk)
            else:
                self._mbr_disk = find_mbr_disk(self.topology)
        return self._mbr_disk

    @property
    def boot_devices(self):
        return [self.udev.to_kernel_device(dev)
                for dev in self.stage1.devices]

    def real_devices(self, dev_name):
        device = self.topology.find_by_name(dev_name)
        if device is None:
            raise DeviceNotFound(dev_name)
        return [d.name for d in device.real_devices()]

    @logged_time("backing up boot sectors")
    def create_backups(self):
        devices = list(self.disks_to_rewrite())
        for dev in self.boot_devices:
            devices.extend(self.real_devices(dev))
        devices.append(self.mbr_disk)
        devices = _uniq(devices)

        LOG.info("Creating backup of boot sectors of %s", devices)
        backups = [BootRecordBackup(d, backup_dir=self.cfg.backup_dir)
                   for d in devices]
        for backup in backups:
            backup.write()

    def gpt(self, disk):
        device = self.topology.find_disk(disk)
        if device is None:
            raise DeviceNotFound(
                disk, "Cannot find in storage mbr disk %s" % disk)
        return device.gpt

    def generic_mbr_file_for(self, disk):
        if self.gpt(disk):
            return self.cfg.gpt_mbr_file
        return self.cfg.dos_mbr_file

    @logged_time("installing generic MBR code")
    def install_generic_mbr(self):
        disks = self.disks_to_rewrite()
        deps.ensure_generic_mbr_support(
            _uniq(self.generic_mbr_file_for(d) for d in disks))

        for disk in disks:
            mbr_file = self.generic_mbr_file_for(disk)
            LOG.info("Copying generic MBR code from %s to %s", mbr_file, disk)
            util.subp(['dd', 'bs=%s' % GENERIC_MBR_CODE_SIZE, 'count=1',
                       'conv=notrunc', 'if=%s' % mbr_file, 'of=%s' % disk])

    def can_activate_partition(self, disk, num):
        return can_activate_partition(self.gpt(disk), num, self.arch)

    @logged_time("activating partitions")
    def activate_partitions(self):
        deps.check_executable(parted.PARTED, 'parted')
        for record in self.partitions_to_activate():
            if record.num is None or record.disk is None:
                raise InternalDataError(
                    "INTERNAL ERROR: Data for partition to activate is "
                    "invalid: %s" % (record, ))

            if not self.can_activate_partition(record.disk, record.num):
                LOG.info("Partition %s on %s cannot be activated, skipping",
                         record.num, record.disk)
                continue

            LOG.info("Activating partition %s on %s", record.num, record.disk)
            if self.gpt(record.disk):
                flag = GPT_BOOT_FLAG
            else:
                flag = DOS_BOOT_FLAG
            parted.set_exclusive_flag(record.disk, record.num, flag)

    def disks_to_rewrite(self):
        """Disks whose MBR gets the generic boot code, if asked for.

        These are the disks under the boot devices whenever one of them
        lives on the mbr disk, else just the mbr disk itself.
        """
        if self._disks_to_rewrite is not None:
            return self._disks_to_rewrite

        mbrs = []
        for dev in self.boot_devices:
            record = self.partition_to_activate(dev)
            if (not record.empty() and
                    self.can_activate_partition(record.disk, record.num)):
                mbrs.append(record.disk)
            else:
                mbrs.append(self.mbr_disk)

        ret = [self.mbr_disk]
        # Add to disks only if part of raid on base devices lives on mbr_disk
        if self.mbr_disk in mbrs:
            ret.extend(mbrs)

        disks = []
        for disk in ret:
            disks.extend(self.real_devices(disk))
        self._disks_to_rewrite = _uniq(disks)
        return self._disks_to_rewrite

    def first_base_device_to_boot(self, dev_name):
        # no BIOS ordering hints available, so just take the first one
        return self.real_devices(dev_name)[0]

    def partition_and_disk_to_activate(self, dev_name):
        partition = None
        for part in self.topology.partitions():
            if part.name == dev_name:
                partition = part
                break

        if partition is not None:
            return partition, partition.disk

        disk = self.topology.find_disk(dev_name)
        # some BIOSes refuse a disk without an active partition even when
        # the boot code is in the MBR, so pick any non-swap partition
        candidates = activatable_partitions(disk)
        partition = candidates[0] if candidates else None
        LOG.info("loader_device is disk device, so use its partition %s",
                 partition)
        return partition, disk

    def partition_to_activate(self, loader_device):
        """Return the ActivationRecord for loader_device.

        An empty record means there is no suitable partition to activate.

        :raises: InvalidLoaderDevice if no disk is found for loader_device.
        """
        if loader_device in self._records:
            return self._records[loader_device]

        real_device = self.first_base_device_to_boot(loader_device)
        LOG.info("real devices for %s is %s", loader_device, real_device)
        partition, mbr_dev = self.partition_and_disk_to_activate(real_device)

        if mbr_dev is None:
            raise InvalidLoaderDevice(
                "Invalid loader device %s" % loader_device)

        record = self._record_for(partition, mbr_dev)
        self._records[loader_device] = record
        return record

    def _record_for(self, partition, mbr_dev):
        # strange, no partitions on our mbr device, we probably won't boot
        if partition is None:
            LOG.warning("no non-swap partitions for mbr device %s",
                        mbr_dev.name)
            return ActivationRecord()

        if partition.partition_id in (ID_SWAP, ID_BIOS_BOOT):
            LOG.warning("%s is a %s partition, it will not be activated",
                        partition.name, partition.partition_id)
            return ActivationRecord()

        if partition.type == PARTITION_LOGICAL:
            LOG.info("Bootloader partition type can be logical")
            partition = extended_partition(mbr_dev)
            if partition is None:
                LOG.warning("no extended partition on %s", mbr_dev.name)
                return ActivationRecord()

        record = ActivationRecord(disk=mbr_dev.name, num=partition.number)
        LOG.info("Partition for activating: %s", record)
        return record

    def partitions_to_activate(self):
        records = [self.partition_to_activate(dev)
                   for dev in self.boot_devices]
        return _uniq(r for r in records if not r.empty())

# vi: ts=4 expandtab syntax=python
