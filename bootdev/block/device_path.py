# This file is part of bootdev. See LICENSE for copyright and license info.

import os
import re

from bootdev import block
from bootdev.config import MODES

_UUID_RE = re.compile(r'UUID="([^"]*)"')
_LABEL_RE = re.compile(r'LABEL="([^"]*)"')


class DevicePath(object):
    """A device given either as a path or as UUID="..." / LABEL="...".

    >>> DevicePath('UUID="0000-00-00"').path
    '/dev/disk/by-uuid/0000-00-00'
    """

    def __init__(self, dev, mode=MODES.normal):
        self.spec = dev
        self.mode = mode
        dev = dev.strip()
        if re.search(r'UUID="[^"]+"', dev):
            self.path = _UUID_RE.sub(block.BY_UUID + r'/\1', dev, count=1)
        elif re.search(r'LABEL="[^"]+"', dev):
            self.path = _LABEL_RE.sub(block.BY_LABEL + r'/\1', dev, count=1)
        else:
            self.path = dev

    def __repr__(self):
        return "DevicePath(%r)" % self.path

    def is_uuid(self):
        return '/by-uuid/' in self.path

    def is_label(self):
        return '/by-label/' in self.path

    def exists(self):
        # a config may be written for any machine, so any path is fine
        if self.mode == MODES.config:
            return True
        # filesystems are created later in an installation, their uuid
        # and label links cannot exist yet
        if self.mode == MODES.installation and (
                self.is_uuid() or self.is_label()):
            return True
        return os.path.exists(self.path)

    valid = exists

# vi: ts=4 expandtab syntax=python
