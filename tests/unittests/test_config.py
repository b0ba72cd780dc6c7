# This file is part of bootdev. See LICENSE for copyright and license info.

import copy
import json
import os
import textwrap
import typing

import attr

from bootdev import config
from .helpers import CiTestCase


class TestMerge(CiTestCase):
    def test_merge_cfg_string(self):
        d1 = {'str1': 'str_one'}
        d2 = {'dict1': {'d1.e1': 'd1-e1'}}

        expected = {'str1': 'str_one', 'dict1': {'d1.e1': 'd1-e1'}}
        config.merge_config(d1, d2)
        self.assertEqual(d1, expected)

    def test_nested_merge(self):
        cfg = {'bootloader': {'stage1': {'devices': ['/dev/sda']},
                              'arch': 'amd64'}}
        config.merge_config_str(cfg, textwrap.dedent("""
            bootloader:
              stage1:
                activate: true
            """))
        self.assertEqual(
            {'bootloader': {'stage1': {'devices': ['/dev/sda'],
                                       'activate': True},
                            'arch': 'amd64'}}, cfg)

    def test_merge_non_dict_raises(self):
        with self.assertRaises(TypeError):
            config.merge_config_str({}, "- a\n- b\n")


class TestCmdArg2Cfg(CiTestCase):
    def test_cmdarg_flat(self):
        self.assertEqual(config.cmdarg2cfg("foo=bar"), {'foo': 'bar'})

    def test_dict_dict(self):
        self.assertEqual(config.cmdarg2cfg("foo/v1/v2=bar"),
                         {'foo': {'v1': {'v2': 'bar'}}})

    def test_no_equal_raises_value_error(self):
        self.assertRaises(ValueError, config.cmdarg2cfg, "foo/v1/v2"),

    def test_json(self):
        self.assertEqual(
            config.cmdarg2cfg('json:foo/bar=["a", "b", "c"]', delim="/"),
            {'foo': {'bar': ['a', 'b', 'c']}})

    def test_invalid_json(self):
        self.assertRaises(ValueError, config.cmdarg2cfg, 'json:foo=[1,')

    def test_cmdarg_multiple_equal(self):
        self.assertEqual(
            config.cmdarg2cfg("key=mykey=value"),
            {"key": "mykey=value"})

    def test_with_merge_cmdarg(self):
        cfg1 = {'foo': {'key1': 'val1', 'mylist': [1, 2]}, 'f': 'fval'}
        cfg2 = {'foo': {'key2': 'val2', 'mylist2': ['a', 'b']}, 'g': 'gval'}

        via_merge = copy.deepcopy(cfg1)
        config.merge_config(via_merge, cfg2)

        via_merge_cmdarg = copy.deepcopy(cfg1)
        config.merge_cmdarg(via_merge_cmdarg, 'json:=' + json.dumps(cfg2))

        self.assertEqual(via_merge, via_merge_cmdarg)


class TestLoadConfig(CiTestCase):

    def test_empty_file(self):
        path = self.tmp_path('empty.yaml')
        with open(path, 'w') as fp:
            fp.write('')
        self.assertEqual({}, config.load_config(path))

    def test_load_command_config_from_state(self):
        path = self.tmp_path('bootdev.yaml')
        with open(path, 'w') as fp:
            fp.write('mode: config\n')
        args = type('Args', (), {'config': {}})()
        self.assertEqual({'mode': 'config'},
                         config.load_command_config(args, {'config': path}))

    def test_load_command_config_prefers_args(self):
        args = type('Args', (), {'config': {'mode': 'installation'}})()
        self.assertEqual({'mode': 'installation'},
                         config.load_command_config(args, {'config': None}))

    def test_load_command_config_nothing(self):
        args = type('Args', (), {'config': {}})()
        self.assertEqual({}, config.load_command_config(args, {}))

    def test_dump_roundtrip_through_file(self):
        cfg = {'bootloader': {'stage1': {'devices': ['/dev/sda']}}}
        path = self.tmp_path('dump.yaml')
        with open(path, 'w') as fp:
            fp.write(config.dump_config(cfg))
        self.assertTrue(os.path.getsize(path) > 0)
        self.assertEqual(cfg, config.load_config(path))


class TestMode(CiTestCase):

    def test_default(self):
        self.assertEqual(config.MODES.normal, config.get_mode({}))

    def test_from_config(self):
        self.assertEqual(config.MODES.config,
                         config.get_mode({'mode': 'config'}))

    def test_from_environment(self):
        self.assertEqual(
            config.MODES.installation,
            config.get_mode({}, env={'mode': 'installation'}))

    def test_config_wins_over_environment(self):
        self.assertEqual(
            config.MODES.normal,
            config.get_mode({'mode': 'normal'}, env={'mode': 'config'}))

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            config.get_mode({'mode': 'rescue'})


class TestDeserializer(CiTestCase):

    def test_scalar(self):
        deserializer = config.Deserializer()
        self.assertEqual(1, deserializer.deserialize(int, 1))
        self.assertEqual("a", deserializer.deserialize(str, "a"))

    def test_attr(self):
        deserializer = config.Deserializer()

        @attr.s(auto_attribs=True)
        class Point:
            x: int
            y: int

        self.assertEqual(
            Point(x=1, y=2),
            deserializer.deserialize(Point, {'x': 1, 'y': 2}))

    def test_list(self):
        deserializer = config.Deserializer()
        self.assertEqual(
            ['a', 'b'],
            deserializer.deserialize(typing.List[str], ['a', 'b']))

    def test_optional(self):
        deserializer = config.Deserializer()
        self.assertEqual(
            1,
            deserializer.deserialize(typing.Optional[int], 1))
        self.assertEqual(
            None,
            deserializer.deserialize(typing.Optional[int], None))

    def test_wrong_type(self):
        deserializer = config.Deserializer()
        with self.assertRaises(config.SerializationError) as exc:
            deserializer.deserialize(typing.List[str], ['a', 1])
        self.assertIn('at [1]', str(exc.exception))

    def test_converter(self):
        deserializer = config.Deserializer()

        @attr.s(auto_attribs=True)
        class WithoutConverter:
            val: bool

        with self.assertRaises(config.SerializationError):
            deserializer.deserialize(WithoutConverter, {"val": "on"})

        @attr.s(auto_attribs=True)
        class WithConverter:
            val: bool = attr.ib(converter=config.value_as_boolean)

        self.assertEqual(
            WithConverter(val=True),
            deserializer.deserialize(WithConverter, {"val": "on"}))

    def test_dash_to_underscore(self):
        deserializer = config.Deserializer()

        @attr.s(auto_attribs=True)
        class DashToUnderscore:
            a_b: bool = False

        self.assertEqual(
            DashToUnderscore(a_b=True),
            deserializer.deserialize(DashToUnderscore, {"a-b": True}))


class TestBootloaderCfg(CiTestCase):

    def test_defaults(self):
        bootcfg = config.load_bootloader_config({})
        self.assertEqual([], bootcfg.stage1.devices)
        self.assertFalse(bootcfg.stage1.generic_mbr)
        self.assertFalse(bootcfg.stage1.mbr)
        self.assertFalse(bootcfg.stage1.activate)
        self.assertIsNone(bootcfg.mbr_disk)
        self.assertEqual(config.DEFAULT_BACKUP_DIR, bootcfg.backup_dir)
        self.assertEqual(config.GPT_MBR, bootcfg.gpt_mbr_file)
        self.assertEqual(config.DOS_MBR, bootcfg.dos_mbr_file)

    def test_full(self):
        bootcfg = config.load_bootloader_config({'bootloader': {
            'stage1': {'devices': ['/dev/sda', 'UUID="abcd"'],
                       'generic-mbr': 'true', 'mbr': False,
                       'activate': 1},
            'mbr_disk': '/dev/disk/by-id/ata-X',
            'arch': 'ppc64el',
            'backup_dir': '/tmp/backups',
        }})
        self.assertEqual(
            config.Stage1Cfg(devices=['/dev/sda', 'UUID="abcd"'],
                             generic_mbr=True, mbr=False, activate=True),
            bootcfg.stage1)
        self.assertEqual('/dev/disk/by-id/ata-X', bootcfg.mbr_disk)
        self.assertEqual('ppc64el', bootcfg.arch)
        self.assertEqual('/tmp/backups', bootcfg.backup_dir)

    def test_single_device_string(self):
        bootcfg = config.load_bootloader_config(
            {'bootloader': {'stage1': {'devices': '/dev/vda'}}})
        self.assertEqual(['/dev/vda'], bootcfg.stage1.devices)

    def test_invalid_devices(self):
        with self.assertRaises(config.SerializationError):
            config.load_bootloader_config(
                {'bootloader': {'stage1': {'devices': [1]}}})

    def test_unknown_keys_ignored(self):
        bootcfg = config.load_bootloader_config(
            {'bootloader': {'timeout': 5}})
        self.assertEqual(config.BootloaderCfg(), bootcfg)


# vi: ts=4 expandtab syntax=python
