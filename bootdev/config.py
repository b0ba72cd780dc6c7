# This file is part of bootdev. See LICENSE for copyright and license info.

from collections import namedtuple
import json
import typing

import attr
import yaml

DEFAULT_BACKUP_DIR = "/var/lib/bootdev/backup_boot_sectors"
GPT_MBR = "/usr/share/syslinux/gptmbr.bin"
DOS_MBR = "/usr/share/syslinux/mbr.bin"


def mode_enum(*modes):
    return namedtuple('Modes', modes)(*modes)


# normal: operate on the running system
# installation: the target disks are being created, filesystems do not
#   carry their final UUIDs/labels yet
# config: only a configuration is generated, nothing is touched on disk
MODES = mode_enum('normal', 'installation', 'config')


def get_mode(cfg, env=None):
    """Return the execution mode named by cfg['mode'] or the environment."""
    mode = cfg.get('mode')
    if not mode and env:
        mode = env.get('mode')
    if not mode:
        return MODES.normal
    if mode not in MODES:
        raise ValueError("Unknown mode '%s', expected one of %s" %
                         (mode, list(MODES)))
    return mode


def merge_config(cfg, overrides):
    """Recursively merge overrides into cfg in place, overrides win."""
    for key, value in overrides.items():
        current = cfg.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merge_config(current, value)
        else:
            cfg[key] = value


def merge_config_str(cfg, text):
    overrides = yaml.safe_load(text)
    if not isinstance(overrides, dict):
        raise TypeError("Config is not a dictionary: %s" % text)
    merge_config(cfg, overrides)


def merge_config_fp(cfg, fp):
    merge_config_str(cfg, fp.read())


def cmdarg2cfg(cmdarg, delim="/"):
    """Turn 'a/b=val' into {'a': {'b': 'val'}}.

    With a 'json:' prefix on the key the value is parsed as json, and an
    empty key ('json:={...}') makes the value the whole config.
    """
    key, sep, val = cmdarg.partition("=")
    if not sep:
        raise ValueError('no "=" in "%s"' % cmdarg)

    if key.startswith("json:"):
        key = key[len("json:"):]
        try:
            val = json.loads(val)
        except ValueError:
            raise ValueError("setting of key '%s' had invalid json: %s" %
                             (key, val))

    if not key:
        return val
    for item in reversed(key.split(delim)):
        val = {item: val}
    return val


def merge_cmdarg(cfg, cmdarg, delim="/"):
    merge_config(cfg, cmdarg2cfg(cmdarg, delim))


def load_config(cfg_file):
    with open(cfg_file) as fp:
        return yaml.safe_load(fp) or {}


def load_command_config(args, state):
    """Config given on the command line, else the BOOTDEV_CONFIG file."""
    if getattr(args, 'config', None):
        return args.config
    if not state.get('config'):
        return {}
    return load_config(state['config'])


def dump_config(cfg):
    return yaml.dump(cfg, default_flow_style=False, indent=2)


FALSE_VALUES = (False, None, 0, '0', 'False', 'false', 'None', 'none', '',
                'off', 'no')


def value_as_boolean(value):
    return value not in FALSE_VALUES


def _convert_devices(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return value


@attr.s(auto_attribs=True)
class Stage1Cfg:
    """Where the bootloader goes and what to do with the boot sectors."""
    devices: typing.List[str] = attr.ib(
        converter=_convert_devices, default=attr.Factory(list))
    generic_mbr: bool = attr.ib(default=False, converter=value_as_boolean)
    mbr: bool = attr.ib(default=False, converter=value_as_boolean)
    activate: bool = attr.ib(default=False, converter=value_as_boolean)


@attr.s(auto_attribs=True)
class BootloaderCfg:
    stage1: Stage1Cfg = attr.Factory(Stage1Cfg)
    mbr_disk: typing.Optional[str] = None
    arch: typing.Optional[str] = None
    backup_dir: str = DEFAULT_BACKUP_DIR
    gpt_mbr_file: str = GPT_MBR
    dos_mbr_file: str = DOS_MBR


class SerializationError(Exception):
    def __init__(self, obj, path, message):
        self.obj = obj
        self.path = path
        self.message = message

    def __str__(self):
        p = self.path
        if not p:
            p = 'top-level'
        return f"processing {self.obj}: at {p}, {self.message}"


@attr.s(auto_attribs=True)
class SerializationContext:
    obj: typing.Any
    cur: typing.Any
    path: str

    @classmethod
    def new(cls, obj):
        return SerializationContext(obj, obj, '')

    def child(self, path, cur):
        return attr.evolve(self, path=self.path + path, cur=cur)

    def error(self, message):
        raise SerializationError(self.obj, self.path, message)

    def assert_type(self, typ):
        if type(self.cur) is not typ:
            self.error("{!r} is not a {}".format(self.cur, typ))


class Deserializer:
    """Build attrs config objects out of plain yaml data."""

    SCALARS = (int, str, bool, list, dict, type(None))

    def _list(self, args, context):
        context.assert_type(list)
        return [
            self._deserialize(args[0], context.child(f'[{i}]', v))
            for i, v in enumerate(context.cur)
            ]

    def _union(self, args, context):
        if context.cur is None:
            return None
        args = [a for a in args if a is not type(None)]
        if len(args) == 1:
            # I.e. Optional[thing]
            return self._deserialize(args[0], context)
        context.error(f"cannot deserialize Union[{args}]")

    def _attrs(self, annotation, context):
        context.assert_type(dict)
        args = {}
        fields = {field.name: field for field in attr.fields(annotation)}
        for key, value in context.cur.items():
            key = key.replace("-", "_")
            if key not in fields:
                continue
            field = fields[key]
            if field.converter:
                value = field.converter(value)
            args[field.name] = self._deserialize(
                field.type, context.child(f'[{key!r}]', value))
        return annotation(**args)

    def _deserialize(self, annotation, context):
        if annotation is typing.Any:
            return context.cur
        if attr.has(annotation):
            return self._attrs(annotation, context)
        origin = getattr(annotation, '__origin__', None)
        if origin in (list, typing.List):
            return self._list(annotation.__args__, context)
        if origin is typing.Union:
            return self._union(annotation.__args__, context)
        if annotation in self.SCALARS:
            context.assert_type(annotation)
            return context.cur
        context.error(f"unsupported annotation {annotation}")

    def deserialize(self, annotation, value):
        return self._deserialize(annotation, SerializationContext.new(value))


T = typing.TypeVar("T")


def fromdict(cls: typing.Type[T], d) -> T:
    return Deserializer().deserialize(cls, d)


def load_bootloader_config(cfg):
    """Return a BootloaderCfg for the 'bootloader' section of cfg."""
    return fromdict(BootloaderCfg, cfg.get('bootloader') or {})

# vi: ts=4 expandtab syntax=python
