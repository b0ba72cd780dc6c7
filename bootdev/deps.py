# This file is part of bootdev. See LICENSE for copyright and license info.

import os

from bootdev.log import LOG
from bootdev.util import which

GENERIC_MBR_PACKAGE = 'syslinux'


class MissingDeps(Exception):
    def __init__(self, message, deps):
        self.message = message
        if isinstance(deps, str) or deps is None:
            deps = [deps]
        self.deps = [d for d in deps if d is not None]
        self.fatal = None in deps

    def __str__(self):
        if self.fatal:
            if not len(self.deps):
                return self.message + " Unresolvable."
            return (self.message +
                    " Unresolvable.  Partially resolvable with packages: %s" %
                    ' '.join(self.deps))
        else:
            return self.message + " Install packages: %s" % ' '.join(self.deps)


def check_executable(cmdname, pkg):
    if not which(cmdname):
        raise MissingDeps("Missing program '%s'." % cmdname, pkg)


def check_file(path, pkg):
    if not os.path.isfile(path):
        raise MissingDeps("Missing file '%s'." % path, pkg)


def ensure_generic_mbr_support(mbr_files):
    """Raise MissingDeps unless dd and every boot code file are present."""
    check_executable('dd', 'coreutils')
    for path in mbr_files:
        check_file(path, GENERIC_MBR_PACKAGE)
    LOG.debug("generic boot code available: %s", mbr_files)

# vi: ts=4 expandtab syntax=python
