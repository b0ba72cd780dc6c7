# This file is part of bootdev. See LICENSE for copyright and license info.

from bootdev.block import DeviceNotFound
from bootdev.config import MODES
from bootdev.log import LOG


class UdevMapping(object):
    """Translate between kernel device names and udev names.

    One instance serves one bootloader installation run; the storage
    topology it reads is not expected to change during that run.
    """

    def __init__(self, topology, mode=MODES.normal):
        self.topology = topology
        self.mode = mode

    def to_kernel_device(self, dev):
        """Convert a udev, md or kernel name to the kernel device name.

        :param dev: name like /dev/disk/by-id/blabla, /dev/sda1 or
                    UUID="...".
        :raises: DeviceNotFound if nothing in the topology matches dev.
        :returns: the kernel device name.  In config mode dev is returned
                  untouched since there is no storage to look at.
        """
        LOG.info("call to_kernel_device for %s", dev)
        if dev is None:
            raise ValueError("invalid device None")

        if self.mode == MODES.config:
            return dev

        device = self.topology.find_by_any_name(dev)
        if device is None:
            raise DeviceNotFound(dev)

        # As wire devices have identical udev devices as its multipath
        # device, we must ensure we are using the multipath device and not
        # the wire
        if device.is_type('disk'):
            for desc in device.descendants():
                if desc.is_type('multipath'):
                    device = desc
                    break

        return device.name

    def to_mountby_device(self, dev):
        """Convert a udev or kernel name to the udev name that fits best.

        The configured mount_by of the filesystem wins; for anything not
        mounted the topology's preferred name is used.
        """
        kernel_dev = self.to_kernel_device(dev)
        LOG.info("%s looked as kernel device name: %s", dev, kernel_dev)

        device = self.topology.find_by_name(kernel_dev)
        if device is None:
            LOG.error("Cannot find %s", kernel_dev)
            return kernel_dev

        udev = udev_path(device)
        LOG.info("udev device for %r is %r", kernel_dev, udev)
        return udev


def udev_path(device):
    filesystem = device.filesystem
    if filesystem is None:
        LOG.info("udev_path: not formatted, using preferred udev name for "
                 "the block device")
        return device.preferred_name

    mount_by_name = filesystem.mount_by_name
    if mount_by_name:
        LOG.info("udev_path: using the udev name of the configured mount_by")
        return mount_by_name

    LOG.info("udev_path: using the preferred udev name for the filesystem")
    return filesystem.preferred_name

# vi: ts=4 expandtab syntax=python
