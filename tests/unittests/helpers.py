# This file is part of bootdev. See LICENSE for copyright and license info.

import os
import random
import shutil
import string
import tempfile
from unittest import TestCase

import mock

from bootdev import util


def random_string(length=8):
    """ return a random lowercase string with default length of 8"""
    return ''.join(
        random.choice(string.ascii_lowercase) for _ in range(length))


def raise_pexec_error(*args, **kwargs):
    raise util.ProcessExecutionError()


def touch_dd_output(args, content=''):
    """Write content to the of= file of a dd argv unless it is a device."""
    for arg in args:
        if not arg.startswith('of='):
            continue
        path = arg[len('of='):]
        if path.startswith('/dev/') or not os.path.isdir(
                os.path.dirname(path)):
            return
        with open(path, 'w') as fp:
            fp.write(content)


def storage_config(*items):
    """Wrap topology items into a version 1 storage config."""
    return {'version': 1, 'config': list(items)}


class CiTestCase(TestCase):
    """Common testing class which all bootdev unit tests subclass."""

    def add_patch(self, target, attr, **kwargs):
        """Patches specified target object and sets it as attr on test
        instance also schedules cleanup"""
        if 'autospec' not in kwargs:
            kwargs['autospec'] = True
        m = mock.patch(target, **kwargs)
        p = m.start()
        self.addCleanup(m.stop)
        setattr(self, attr, p)

    def tmp_dir(self, dir=None, cleanup=True):
        """Return a full path to a temporary directory for the test run."""
        if dir is None:
            tmpd = tempfile.mkdtemp(
                prefix="bootdev-ci-%s." % self.__class__.__name__)
        else:
            tmpd = tempfile.mkdtemp(dir=dir)
        if cleanup:
            self.addCleanup(shutil.rmtree, tmpd)
        return tmpd

    def tmp_path(self, path, _dir=None):
        # return an absolute path to 'path' under dir.
        # if dir is None, one will be created with tmp_dir()
        # the file is not created or modified.
        if _dir is None:
            _dir = self.tmp_dir()

        return os.path.normpath(
            os.path.abspath(os.path.sep.join((_dir, path))))

    @classmethod
    def random_string(cls, length=8):
        return random_string(length)


class FakeParted(object):
    """Stand-in for util.subp that keeps partition flags like parted would.

    flags is {disk: {number: [flag, ...]}}.  Every command seen is kept in
    calls.  dd into a regular file creates that file empty; dd onto a
    device and anything else succeeds without doing anything.
    """

    def __init__(self, flags=None):
        self.flags = flags if flags is not None else {}
        self.calls = []

    def __call__(self, args, **kwargs):
        args = list(args)
        self.calls.append(args)
        if args[0] == 'dd':
            touch_dd_output(args)
        if args[0] != 'parted':
            return ('', '')
        disk = args[2]
        parts = self.flags.setdefault(disk, {})
        if args[3] == 'print':
            lines = ['BYT;', '%s:10.7GB:scsi:512:512:gpt:FAKE DISK:;' % disk]
            for num in sorted(parts):
                lines.append('%s:1049kB:2097kB:1049kB:ext4::%s;' %
                             (num, ', '.join(parts[num])))
            return ('\n'.join(lines) + '\n', '')
        if args[3] == 'set':
            num, flag, state = int(args[4]), args[5], args[6]
            current = parts.setdefault(num, [])
            if state == 'on' and flag not in current:
                current.append(flag)
            elif state == 'off' and flag in current:
                current.remove(flag)
        return ('', '')

    def commands(self, name):
        return [c for c in self.calls if c[0] == name]

# vi: ts=4 expandtab syntax=python
