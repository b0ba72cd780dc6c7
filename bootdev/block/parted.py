# This file is part of bootdev. See LICENSE for copyright and license info.

import re

from bootdev import util
from bootdev.log import LOG

PARTED = 'parted'


def parse_partition_flags(output):
    """Parse `parted -sm <disk> print` output into {number: [flags]}.

    Machine readable lines look like::

        BYT;
        /dev/sda:21.5GB:scsi:512:512:gpt:QEMU HARDDISK:;
        1:1049kB:2097kB:1049kB::bios:bios_grub;
        2:2097kB:21.5GB:21.5GB:ext4::legacy_boot, esp;

    The disk line is skipped; the seventh field of a partition line
    carries the flags.
    """
    flags = {}
    for line in output.splitlines():
        fields = line.strip().rstrip(';').split(':')
        if not fields[0].isdigit():
            continue
        names = fields[6] if len(fields) > 6 else ''
        flags[int(fields[0])] = [f for f in re.split(r'[,\s]+', names) if f]
    return flags


def get_partition_flags(disk):
    out, _ = util.subp([PARTED, '-sm', disk, 'print'], capture=True)
    return parse_partition_flags(out)


def set_partition_flag(disk, number, flag, state=True):
    util.subp([PARTED, '-s', disk, 'set', str(number), flag,
               'on' if state else 'off'])


def reset_flag(disk, flag, keep=None):
    """Turn flag off on every partition of disk except number keep."""
    for number, flags in sorted(get_partition_flags(disk).items()):
        if flag in flags and number != keep:
            LOG.info("Removing %s flag from partition %s on %s",
                     flag, number, disk)
            set_partition_flag(disk, number, flag, state=False)


def set_exclusive_flag(disk, number, flag):
    """Set flag on partition number only, clearing it everywhere else.

    Some firmware refuses to boot a disk with more than one active partition.
    """
    reset_flag(disk, flag, keep=number)
    set_partition_flag(disk, number, flag)

# vi: ts=4 expandtab syntax=python
