# This file is part of bootdev. See LICENSE for copyright and license info.

import os
import stat

import mock
from parameterized import parameterized

from bootdev import util
from .helpers import CiTestCase


class TestSubp(CiTestCase):

    def test_capture(self):
        out, err = util.subp(['sh', '-c', 'echo hi; echo err 1>&2'],
                             capture=True)
        self.assertEqual('hi\n', out)
        self.assertEqual('err\n', err)

    def test_no_capture(self):
        self.assertEqual((None, None), util.subp(['true']))

    def test_combine_capture(self):
        out, err = util.subp(['sh', '-c', 'echo a; echo b 1>&2'],
                             combine_capture=True)
        self.assertEqual('a\nb\n', out)
        self.assertEqual('', err)

    def test_data_on_stdin(self):
        out, _ = util.subp(['cat'], data=b'boot sector', capture=True)
        self.assertEqual('boot sector', out)

    def test_no_decode(self):
        out, _ = util.subp(['printf', 'x'], capture=True, decode=False)
        self.assertEqual(b'x', out)

    def test_bad_exit_raises(self):
        with self.assertRaises(util.ProcessExecutionError) as ctx:
            util.subp(['sh', '-c', 'exit 3'])
        self.assertEqual(3, ctx.exception.exit_code)

    def test_allowed_return_codes(self):
        util.subp(['sh', '-c', 'exit 3'], rcs=[0, 3])

    def test_missing_program(self):
        with self.assertRaises(util.ProcessExecutionError) as ctx:
            util.subp(['/nonexistent/' + self.random_string()])
        self.assertIsInstance(ctx.exception.reason, OSError)


class TestProcessExecutionError(CiTestCase):

    def test_message(self):
        error = util.ProcessExecutionError(
            stdout='out\nmore', stderr=b'err', exit_code=1,
            cmd=['parted', '-s', '/dev/sda', 'print'])
        self.assertIn("Command: ['parted', '-s', '/dev/sda', 'print']",
                      str(error))
        self.assertIn('Exit code: 1', str(error))
        self.assertIn('Stdout: out\n        more', str(error))
        self.assertIn('Stderr: err', str(error))

    def test_defaults(self):
        error = util.ProcessExecutionError()
        self.assertEqual('-', error.cmd)
        self.assertEqual('-', error.exit_code)
        self.assertIn('Unexpected error while running command.', str(error))


class TestWhich(CiTestCase):

    def setUp(self):
        super(TestWhich, self).setUp()
        self.bindir = self.tmp_dir()
        self.exe = os.path.join(self.bindir, 'parted')
        with open(self.exe, 'w') as fp:
            fp.write('#!/bin/sh\n')
        os.chmod(self.exe, stat.S_IRWXU)

    def test_found_in_search(self):
        self.assertEqual(self.exe, util.which('parted', search=[self.bindir]))

    def test_not_found(self):
        self.assertIsNone(util.which('dd', search=[self.bindir]))

    def test_absolute_path(self):
        self.assertEqual(self.exe, util.which(self.exe))
        self.assertIsNone(util.which(os.path.join(self.bindir, 'dd')))

    def test_not_executable(self):
        os.chmod(self.exe, stat.S_IRUSR)
        self.assertIsNone(util.which('parted', search=[self.bindir]))

    def test_uses_path(self):
        with mock.patch.dict(os.environ, {'PATH': self.bindir}):
            self.assertEqual(self.exe, util.which('parted'))


class TestEnsureDir(CiTestCase):

    def test_creates_nested(self):
        path = os.path.join(self.tmp_dir(), 'a', 'b')
        util.ensure_dir(path)
        self.assertTrue(os.path.isdir(path))

    def test_existing_is_fine(self):
        path = self.tmp_dir()
        util.ensure_dir(path)
        self.assertTrue(os.path.isdir(path))

    def test_mode(self):
        path = os.path.join(self.tmp_dir(), 'backup')
        util.ensure_dir(path, mode=0o700)
        self.assertEqual(0o700, stat.S_IMODE(os.stat(path).st_mode))


class TestArch(CiTestCase):

    @parameterized.expand([
        ('ppc64el', True),
        ('ppc64', True),
        ('ppc', True),
        ('powerpc', True),
        ('amd64', False),
        ('i386', False),
        ('s390x', False),
        (None, False),
        ('', False),
    ])
    def test_is_ppc_arch(self, arch, expected):
        self.assertEqual(expected, util.is_ppc_arch(arch))

    @parameterized.expand([
        ('x86_64', 'amd64'),
        ('i686', 'i386'),
        ('ppc64le', 'ppc64el'),
        ('aarch64', 'arm64'),
        ('s390x', 's390x'),
    ])
    def test_get_platform_arch(self, machine, expected):
        with mock.patch('bootdev.util.platform.machine',
                        return_value=machine):
            self.assertEqual(expected, util.get_platform_arch())


class TestLoadCommandEnvironment(CiTestCase):

    def test_mapping(self):
        env = {'BOOTDEV_CONFIG': '/etc/bootdev.yaml',
               'BOOTDEV_MODE': 'installation', 'OTHER': 'x'}
        self.assertEqual(
            {'config': '/etc/bootdev.yaml', 'mode': 'installation'},
            util.load_command_environment(env))

    def test_unset(self):
        self.assertEqual({'config': None, 'mode': None},
                         util.load_command_environment({}))


# vi: ts=4 expandtab syntax=python
