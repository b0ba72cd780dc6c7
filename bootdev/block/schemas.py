# This file is part of bootdev. See LICENSE for copyright and license info.

_uuid_pattern = (
    r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-'
    r'[0-9a-fA-F]{12}|[0-9a-fA-F]{4}-[0-9a-fA-F]{4}')
_path_dev = r'^/dev/[^/]+(/[^/]+)*$'
_path_nondev = r'(^/$|^(/[^/]+)+$)'
_ptables = ['dos', 'gpt', 'msdos']

definitions = {
    'id': {'type': 'string'},
    'ref_id': {'type': 'string'},
    'devices': {'type': 'array', 'items': {'$ref': '#/definitions/ref_id'}},
    'name': {'type': 'string'},
    'path': {'type': 'string', 'pattern': _path_dev},
    'ptable': {'type': 'string', 'enum': _ptables},
    'uuid': {
        'type': 'string',
        'pattern': _uuid_pattern,
    },
}

DISK = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'name': 'BOOTDEV-DISK',
    'title': 'bootdev topology entry for disks',
    'description': (
        'A physical disk, optionally a wire leg of a multipath map.'),
    'definitions': definitions,
    'required': ['id', 'type', 'path'],
    'type': 'object',
    'additionalProperties': False,
    'properties': {
        'id': {'$ref': '#/definitions/id'},
        'type': {'const': 'disk'},
        'path': {'$ref': '#/definitions/path'},
        'ptable': {'$ref': '#/definitions/ptable'},
        'serial': {'type': 'string'},
        'wwn': {'type': 'string'},
        'path_id': {'type': 'string'},
        'model': {'type': 'string'},
        'multipath': {'type': 'string'},
    },
}
RAID = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'name': 'BOOTDEV-RAID',
    'title': 'bootdev topology entry for a software RAID.',
    'description': ('An md array assembled from disks or partitions.'),
    'definitions': definitions,
    'required': ['id', 'type', 'name', 'devices'],
    'type': 'object',
    'additionalProperties': False,
    'properties': {
        'id': {'$ref': '#/definitions/id'},
        'type': {'const': 'raid'},
        'name': {'$ref': '#/definitions/name'},
        'path': {'$ref': '#/definitions/path'},
        'devices': {'$ref': '#/definitions/devices'},
        'ptable': {'$ref': '#/definitions/ptable'},
        'raidlevel': {'type': ['integer', 'string']},
    },
}
PARTITION = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'name': 'BOOTDEV-PARTITION',
    'title': 'bootdev topology entry for partitions',
    'description': ('A partition of a disk, multipath map or RAID.'),
    'definitions': definitions,
    'required': ['id', 'type', 'device', 'number'],
    'type': 'object',
    'additionalProperties': False,
    'properties': {
        'id': {'$ref': '#/definitions/id'},
        'type': {'const': 'partition'},
        'device': {'$ref': '#/definitions/ref_id'},
        'number': {'type': 'integer', 'minimum': 1},
        'path': {'$ref': '#/definitions/path'},
        'flag': {'type': 'string',
                 'enum': ['bios_grub', 'boot', 'extended', 'home', 'linux',
                          'logical', 'lvm', 'mbr', 'prep', 'raid', 'swap',
                          'msftres', '']},
    }
}
FORMAT = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'name': 'BOOTDEV-FORMAT',
    'title': 'bootdev topology entry for filesystems',
    'description': ('A filesystem living on a block device.'),
    'definitions': definitions,
    'required': ['id', 'type', 'volume', 'fstype'],
    'type': 'object',
    'additionalProperties': False,
    'properties': {
        'id': {'$ref': '#/definitions/id'},
        'type': {'const': 'format'},
        'volume': {'$ref': '#/definitions/ref_id'},
        'fstype': {'type': 'string'},
        'uuid': {'$ref': '#/definitions/uuid'},
        'label': {'type': 'string'},
    }
}
MOUNT = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'name': 'BOOTDEV-MOUNT',
    'title': 'bootdev topology entry for mounts',
    'description': ('Where a filesystem is mounted and how it is named.'),
    'definitions': definitions,
    'required': ['id', 'type', 'device'],
    'type': 'object',
    'additionalProperties': False,
    'properties': {
        'id': {'$ref': '#/definitions/id'},
        'type': {'const': 'mount'},
        'device': {'$ref': '#/definitions/ref_id'},
        'path': {
            'type': 'string',
            'oneOf': [
                {'pattern': _path_nondev},
                {'enum': ['none']},
            ],
        },
        'mount_by': {'type': 'string',
                     'enum': ['device', 'id', 'label', 'path', 'uuid']},
    },
}

STORAGE_TYPES = {
    'disk': DISK,
    'format': FORMAT,
    'mount': MOUNT,
    'partition': PARTITION,
    'raid': RAID,
}

STORAGE_CONFIG_SCHEMA = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'name': 'BOOTDEV-STORAGE',
    'title': 'bootdev storage topology.',
    'description': (
        'Read only description of the disks a bootloader is installed to.'),
    'required': ['version', 'config'],
    'definitions': definitions,
    'properties': {
        'version': {'type': 'integer', 'enum': [1]},
        'config': {
            'type': 'array',
            'items': {
                'oneOf': [STORAGE_TYPES[k] for k in sorted(STORAGE_TYPES)],
            },
        },
    },
    'additionalProperties': False,
}

# vi: ts=4 expandtab syntax=python
