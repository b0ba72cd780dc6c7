# This file is part of bootdev. See LICENSE for copyright and license info.

import sys

from bootdev import config
from bootdev import util
from bootdev.block.device_path import DevicePath
from bootdev.block.topology import load_topology
from bootdev.block.udev_mapping import UdevMapping
from . import populate_one_subcmd

CMD_ARGUMENTS = (
    (('devices',
      {'help': 'device names, udev links, UUID="..." or LABEL="..."',
       'metavar': 'DEVICE', 'nargs': '+'}),
     (('--mountby', ),
      {'help': 'print the preferred udev name instead of the kernel name',
       'action': 'store_true', 'default': False}),
     (('--check', ),
      {'help': 'only check that each device path exists',
       'action': 'store_true', 'default': False}),
     )
)


def resolve_main(args):
    state = util.load_command_environment()
    cfg = config.load_command_config(args, state)
    mode = config.get_mode(cfg, state)

    if args.check:
        ret = 0
        for dev in args.devices:
            path = DevicePath(dev, mode=mode)
            valid = path.exists()
            sys.stdout.write("%s %s\n" % (path.path,
                                          "ok" if valid else "missing"))
            if not valid:
                ret = 1
        return ret

    topology = load_topology(cfg, mode)
    mapping = UdevMapping(topology, mode=mode)
    for dev in args.devices:
        if args.mountby:
            name = mapping.to_mountby_device(dev)
        else:
            name = mapping.to_kernel_device(dev)
        sys.stdout.write("%s\n" % name)
    return 0


def POPULATE_SUBCMD(parser):
    populate_one_subcmd(parser, CMD_ARGUMENTS, resolve_main)

# vi: ts=4 expandtab syntax=python
