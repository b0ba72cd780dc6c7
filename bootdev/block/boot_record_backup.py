# This file is part of bootdev. See LICENSE for copyright and license info.

import os

from bootdev import util
from bootdev.config import DEFAULT_BACKUP_DIR
from bootdev.log import LOG

BOOT_RECORD_SIZE = 512
KEPT_BACKUPS = 10
PARTIAL_SUFFIX = '.partial'


class BootRecordBackup(object):
    """Copy of the first sector of a disk or partition.

    Backups of the same device are rotated: the newest is <name>, older
    ones are <name>.1 ... <name>.9.
    """

    def __init__(self, device, backup_dir=DEFAULT_BACKUP_DIR):
        if not device:
            raise ValueError("Invalid device for boot record backup: %s" %
                             device)
        self.device = device
        self.backup_dir = backup_dir

    def __repr__(self):
        return "BootRecordBackup(%s -> %s)" % (self.device, self.backup_path)

    @property
    def backup_path(self):
        return os.path.join(self.backup_dir, self.device.replace('/', '_'))

    def exists(self):
        return os.path.exists(self.backup_path)

    def _rotate(self):
        oldest = "%s.%s" % (self.backup_path, KEPT_BACKUPS - 1)
        if os.path.exists(oldest):
            os.remove(oldest)
        for num in range(KEPT_BACKUPS - 2, 0, -1):
            src = "%s.%s" % (self.backup_path, num)
            if os.path.exists(src):
                os.rename(src, "%s.%s" % (self.backup_path, num + 1))
        os.rename(self.backup_path, self.backup_path + ".1")

    def write(self):
        """Save the boot sector, raising ProcessExecutionError on failure.

        dd writes to a scratch file; the existing backups are only rotated
        once that copy is complete.
        """
        util.ensure_dir(self.backup_dir)
        partial = self.backup_path + PARTIAL_SUFFIX
        LOG.info("Backing up boot sector of %s to %s",
                 self.device, self.backup_path)
        try:
            util.subp(['dd', 'if=%s' % self.device, 'of=%s' % partial,
                       'bs=%s' % BOOT_RECORD_SIZE, 'count=1'])
        except util.ProcessExecutionError:
            if os.path.exists(partial):
                os.remove(partial)
            raise

        if self.exists():
            self._rotate()
        os.rename(partial, self.backup_path)

# vi: ts=4 expandtab syntax=python
