# This file is part of bootdev. See LICENSE for copyright and license info.

"""Read only model of the storage a bootloader gets installed to.

The model is built from a storage config in the same list-of-items style
the installer uses::

    storage:
      version: 1
      config:
        - {type: disk, id: sda, path: /dev/sda, ptable: gpt, serial: X}
        - {type: partition, id: sda1, device: sda, number: 1}
        - {type: format, id: sda1-fs, volume: sda1, fstype: ext4, uuid: ...}
        - {type: mount, id: sda1-mnt, device: sda1-fs, path: /boot}

Nothing in here ever touches a real disk.
"""

import attr
import jsonschema

from bootdev import block
from bootdev.block import schemas
from bootdev.block.device_path import DevicePath
from bootdev.config import MODES
from bootdev.log import LOG

PARTITION_PRIMARY = 'primary'
PARTITION_EXTENDED = 'extended'
PARTITION_LOGICAL = 'logical'

ID_LINUX = 'linux'
ID_SWAP = 'swap'
ID_BIOS_BOOT = 'bios_boot'


def _normalize_ptable(value):
    if value == 'dos':
        return 'msdos'
    return value


@attr.s(eq=False, repr=False)
class BlockDevice(object):
    """Common behaviour of everything that has a node in /dev."""
    id = attr.ib()
    name = attr.ib()
    filesystem = attr.ib(default=None, init=False)
    _parents = attr.ib(default=attr.Factory(list), init=False)
    _children = attr.ib(default=attr.Factory(list), init=False)

    tags = ()

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, self.name)

    def is_type(self, tag):
        return tag in self.tags

    def udev_ids(self):
        return []

    def udev_paths(self):
        return []

    def names(self):
        names = [self.name] + self.udev_ids() + self.udev_paths()
        if self.filesystem is not None:
            names.extend(self.filesystem.names())
        return names

    @property
    def preferred_name(self):
        """Most stable name for the bare device: by-id, by-path, kernel."""
        for candidates in (self.udev_ids(), self.udev_paths()):
            if candidates:
                return candidates[0]
        return self.name

    @property
    def partitions(self):
        parts = [c for c in self._children if isinstance(c, Partition)]
        return sorted(parts, key=lambda p: p.number)

    def add_child(self, child):
        self._children.append(child)
        child._parents.append(self)

    def _walk(self, attribute):
        found = []
        todo = list(getattr(self, attribute))
        while todo:
            dev = todo.pop(0)
            if dev in found:
                continue
            found.append(dev)
            todo.extend(getattr(dev, attribute))
        return found

    def ancestors(self):
        return self._walk('_parents')

    def descendants(self):
        return self._walk('_children')

    def real_devices(self):
        return [self]


@attr.s(eq=False, repr=False)
class Disk(BlockDevice):
    ptable = attr.ib(default=None, converter=_normalize_ptable)
    serial = attr.ib(default=None)
    wwn = attr.ib(default=None)
    path_id = attr.ib(default=None)
    model = attr.ib(default=None)

    @property
    def tags(self):
        return ('disk', ) + _ptable_tags(self.ptable)

    @property
    def gpt(self):
        return self.ptable == 'gpt'

    def udev_ids(self):
        ids = []
        if self.serial:
            ids.append(block.udev_link(block.BY_ID, self.serial))
        if self.wwn:
            ids.append(block.udev_link(block.BY_ID, 'wwn-' + self.wwn))
        return ids

    def udev_paths(self):
        if self.path_id:
            return [block.udev_link(block.BY_PATH, self.path_id)]
        return []


@attr.s(eq=False, repr=False)
class Multipath(BlockDevice):
    """A device mapper multipath map; its parents are the wire legs."""
    map_name = attr.ib(default=None)

    @property
    def legs(self):
        return list(self._parents)

    @property
    def ptable(self):
        for leg in self.legs:
            if leg.ptable:
                return leg.ptable
        return None

    @property
    def gpt(self):
        return self.ptable == 'gpt'

    @property
    def tags(self):
        return ('multipath', ) + _ptable_tags(self.ptable)

    def udev_ids(self):
        # the legs and the map share their identities
        ids = []
        for leg in self.legs:
            ids.extend(i for i in leg.udev_ids() if i not in ids)
        ids.append(block.udev_link(block.BY_ID, 'dm-name-' + self.map_name))
        return ids


@attr.s(eq=False, repr=False)
class Raid(BlockDevice):
    md_name = attr.ib(default=None)
    ptable = attr.ib(default=None, converter=_normalize_ptable)
    raidlevel = attr.ib(default=None)

    @property
    def members(self):
        return list(self._parents)

    @property
    def gpt(self):
        return self.ptable == 'gpt'

    @property
    def tags(self):
        return ('raid', 'md') + _ptable_tags(self.ptable)

    def udev_ids(self):
        return [block.udev_link(block.BY_ID, 'md-name-' + self.md_name)]

    def real_devices(self):
        found = []
        for member in self.members:
            for dev in member.real_devices():
                if dev not in found:
                    found.append(dev)
        return found


@attr.s(eq=False, repr=False)
class Partition(BlockDevice):
    number = attr.ib(default=None)
    flag = attr.ib(default=None)

    tags = ('partition', )

    @property
    def disk(self):
        return self._parents[0] if self._parents else None

    @property
    def type(self):
        if self.flag == PARTITION_EXTENDED:
            return PARTITION_EXTENDED
        if self.flag == PARTITION_LOGICAL:
            return PARTITION_LOGICAL
        disk = self.disk
        if disk is not None and not disk.gpt and self.number > 4:
            return PARTITION_LOGICAL
        return PARTITION_PRIMARY

    @property
    def partition_id(self):
        if self.flag == 'swap':
            return ID_SWAP
        if self.filesystem is not None and self.filesystem.fstype == 'swap':
            return ID_SWAP
        if self.flag == 'bios_grub':
            return ID_BIOS_BOOT
        return ID_LINUX

    def udev_ids(self):
        return [i + '-part%s' % self.number for i in self.disk.udev_ids()]

    def udev_paths(self):
        return [p + '-part%s' % self.number for p in self.disk.udev_paths()]


@attr.s(eq=False)
class Filesystem(object):
    id = attr.ib()
    volume = attr.ib(repr=False)
    fstype = attr.ib()
    uuid = attr.ib(default=None)
    label = attr.ib(default=None)
    mount_point = attr.ib(default=None)
    mount_by = attr.ib(default=None)

    def names(self):
        names = []
        if self.uuid:
            names.append(block.udev_link(block.BY_UUID, self.uuid))
        if self.label:
            names.append(block.udev_link(block.BY_LABEL, self.label))
        return names

    @property
    def mount_by_name(self):
        """Name for the configured mount_by, None if unset or unavailable."""
        if self.mount_by == 'uuid' and self.uuid:
            return block.udev_link(block.BY_UUID, self.uuid)
        if self.mount_by == 'label' and self.label:
            return block.udev_link(block.BY_LABEL, self.label)
        if self.mount_by == 'id' and self.volume.udev_ids():
            return self.volume.udev_ids()[0]
        if self.mount_by == 'path' and self.volume.udev_paths():
            return self.volume.udev_paths()[0]
        if self.mount_by == 'device':
            return self.volume.name
        return None

    @property
    def preferred_name(self):
        names = self.names()
        if names:
            return names[0]
        return self.volume.preferred_name


def _ptable_tags(ptable):
    if ptable == 'gpt':
        return ('gpt', )
    if ptable == 'msdos':
        return ('dos', )
    return ()


def validate_config(config):
    """Validate a storage topology config, raising ValueError if broken."""
    try:
        jsonschema.validate(config, schemas.STORAGE_CONFIG_SCHEMA)
    except jsonschema.exceptions.ValidationError as e:
        if not isinstance(e.instance, dict) or 'type' not in e.instance:
            raise ValueError("%s in %s" % (e.message, e.instance))
        schema = schemas.STORAGE_TYPES.get(e.instance['type'])
        if schema is None:
            raise ValueError("Unknown storage type: %s in %s" %
                             (e.instance['type'], e.instance))
        try:
            jsonschema.validate(e.instance, schema)
        except jsonschema.exceptions.ValidationError as f:
            raise ValueError("%s in %s" % (f.message, e.instance))
        raise ValueError("%s in %s" % (e.message, e.instance))


class StorageTopology(object):
    """Lookups over a fixed set of block devices and filesystems."""

    def __init__(self):
        self._devices = []
        self._filesystems = []

    @classmethod
    def from_config(cls, storage_cfg, validate=True):
        if validate:
            validate_config(storage_cfg)
        topology = cls()
        topology._load(storage_cfg.get('config', []))
        return topology

    def _load(self, items):
        by_id = {}
        multipaths = {}

        def lookup(ref):
            if ref not in by_id:
                raise ValueError(
                    'Invalid dep_id (%s) not in storage config' % ref)
            return by_id[ref]

        for item in items:
            typ = item['type']
            if typ == 'disk':
                dev = Disk(id=item['id'], name=item['path'],
                           ptable=item.get('ptable'),
                           serial=item.get('serial'), wwn=item.get('wwn'),
                           path_id=item.get('path_id'),
                           model=item.get('model'))
                self.add(dev)
                mp_name = item.get('multipath')
                if mp_name:
                    mpath = multipaths.get(mp_name)
                    if mpath is None:
                        mpath = Multipath(id='multipath-%s' % mp_name,
                                          name='/dev/mapper/%s' % mp_name,
                                          map_name=mp_name)
                        multipaths[mp_name] = mpath
                        self.add(mpath)
                    dev.add_child(mpath)
            elif typ == 'raid':
                dev = Raid(id=item['id'],
                           name=item.get('path', '/dev/md/%s' % item['name']),
                           md_name=item['name'], ptable=item.get('ptable'),
                           raidlevel=item.get('raidlevel'))
                for member in item['devices']:
                    lookup(member).add_child(dev)
                self.add(dev)
            elif typ == 'partition':
                parent = lookup(item['device'])
                # partitions on a wire leg really live on the multipath map
                mpath = _multipath_child(parent)
                if mpath is not None:
                    parent = mpath
                number = item['number']
                dev = Partition(
                    id=item['id'],
                    name=item.get('path',
                                  block.partition_kname(parent.name, number)),
                    number=number, flag=item.get('flag') or None)
                parent.add_child(dev)
                self.add(dev)
            elif typ == 'format':
                volume = lookup(item['volume'])
                dev = Filesystem(id=item['id'], volume=volume,
                                 fstype=item['fstype'],
                                 uuid=item.get('uuid'),
                                 label=item.get('label'))
                volume.filesystem = dev
                self._filesystems.append(dev)
            elif typ == 'mount':
                dev = lookup(item['device'])
                if not isinstance(dev, Filesystem):
                    raise ValueError('mount %s must reference a format, '
                                     'not %s' % (item['id'], item['device']))
                dev.mount_point = item.get('path')
                dev.mount_by = item.get('mount_by')
            else:
                raise ValueError('Unknown storage type: %s' % typ)
            by_id[item['id']] = dev

        LOG.debug('storage topology has %s block devices and %s filesystems',
                  len(self._devices), len(self._filesystems))

    def add(self, device):
        self._devices.append(device)
        return device

    def devices(self):
        return list(self._devices)

    def disks(self):
        """Devices holding a partition table of their own.

        An md array without a declared ptable still counts once partitions
        are put on it; like a plain disk it is then treated as DOS.
        """
        return [d for d in self._devices
                if isinstance(d, (Disk, Multipath)) or
                (isinstance(d, Raid) and (d.ptable or d.partitions))]

    def partitions(self):
        return [d for d in self._devices if isinstance(d, Partition)]

    def filesystems(self):
        return list(self._filesystems)

    def find_by_name(self, name):
        """Return the device whose kernel name is name, or None."""
        for dev in self._devices:
            if dev.name == name:
                return dev
        return None

    def find_by_any_name(self, name):
        """Return the first device known by name under any of its names.

        Kernel names, udev links and UUID="..."/LABEL="..." specs all match.
        """
        path = DevicePath(name).path
        for dev in self._devices:
            if path in dev.names():
                return dev
        return None

    def find_disk(self, name):
        for dev in self.disks():
            if dev.name == name:
                return dev
        return None

    def find_by_mount_point(self, mount_point):
        for fs in self._filesystems:
            if fs.mount_point == mount_point:
                return fs
        return None


def load_topology(cfg, mode=MODES.normal):
    """Build the StorageTopology described by cfg['storage'].

    Config mode needs no storage at all, an empty topology is returned
    when none is given.
    """
    storage_cfg = cfg.get('storage')
    if not storage_cfg:
        if mode == MODES.config:
            return StorageTopology()
        raise ValueError("Missing 'storage' key in config")
    return StorageTopology.from_config(storage_cfg)


def _multipath_child(device):
    if not device.is_type('disk'):
        return None
    for child in device._children:
        if child.is_type('multipath'):
            return child
    return None

# vi: ts=4 expandtab syntax=python
