# This file is part of bootdev. See LICENSE for copyright and license info.

import os

BY_ID = '/dev/disk/by-id'
BY_PATH = '/dev/disk/by-path'
BY_UUID = '/dev/disk/by-uuid'
BY_LABEL = '/dev/disk/by-label'


class DeviceNotFound(ValueError):
    """A device name does not match anything in the storage topology."""

    def __init__(self, name, message=None):
        self.name = name
        if message is None:
            message = "Unknown udev device '%s'" % name
        super(DeviceNotFound, self).__init__(message)


def dev_short(devname):
    """
    get short form of device name
    """
    devname = os.path.normpath(devname)
    if os.path.sep in devname:
        return os.path.basename(devname)
    return devname


def dev_path(devname):
    """
    convert device name to path in /dev
    """
    if devname.startswith('/dev/'):
        return devname
    else:
        return '/dev/' + devname


def partition_kname(disk_path, partition_number):
    """
    Return the device path of partition_number on disk_path, adding the
    separator the kernel (or device mapper) uses for that kind of disk.
    """
    disk_path = dev_path(disk_path)
    if disk_path.startswith('/dev/mapper/'):
        return "%s-part%s" % (disk_path, partition_number)
    kname = dev_short(disk_path)
    for dev_type in ['nvme', 'mmcblk', 'cciss', 'loop', 'dm', 'md']:
        if kname.startswith(dev_type):
            return "%sp%s" % (disk_path, partition_number)
    if disk_path.startswith('/dev/md/') or kname[-1].isdigit():
        return "%sp%s" % (disk_path, partition_number)
    return "%s%s" % (disk_path, partition_number)


def udev_link(directory, value):
    """Return a udev symlink like /dev/disk/by-id/<value>."""
    return os.path.join(directory, value)

# vi: ts=4 expandtab syntax=python
