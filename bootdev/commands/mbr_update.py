# This file is part of bootdev. See LICENSE for copyright and license info.

from bootdev import config
from bootdev import util
from bootdev.block.topology import load_topology
from bootdev.log import LOG
from bootdev.mbr_update import MBRUpdate
from . import populate_one_subcmd

CMD_ARGUMENTS = (
    (('devices',
      {'help': 'stage1 devices, overrides bootloader/stage1/devices',
       'metavar': 'DEVICE', 'nargs': '*', 'default': []}),
     (('--generic-mbr', ),
      {'help': 'write generic boot code to the MBR',
       'action': 'store_true', 'default': None}),
     (('--activate', ),
      {'help': 'flag the boot partition as active',
       'action': 'store_true', 'default': None}),
     (('--mbr', ),
      {'help': 'the bootloader stage1 itself goes to the MBR',
       'action': 'store_true', 'default': None}),
     )
)


def stage1_from_args(args, bootcfg):
    stage1 = bootcfg.stage1
    if args.devices:
        stage1.devices = list(args.devices)
    for name in ('generic_mbr', 'activate', 'mbr'):
        value = getattr(args, name, None)
        if value is not None:
            setattr(stage1, name, value)
    return stage1


def mbr_update_main(args):
    cfg = config.load_command_config(args, util.load_command_environment())
    mode = config.get_mode(cfg, util.load_command_environment())
    bootcfg = config.load_bootloader_config(cfg)
    stage1 = stage1_from_args(args, bootcfg)
    if not stage1.devices:
        raise ValueError("No stage1 devices given. Pass devices or set "
                         "bootloader/stage1/devices")

    topology = load_topology(cfg, mode)
    LOG.debug("mbr-update in %s mode", mode)
    MBRUpdate(topology, bootcfg=bootcfg, mode=mode).run(stage1)
    return 0


def POPULATE_SUBCMD(parser):
    populate_one_subcmd(parser, CMD_ARGUMENTS, mbr_update_main)

# vi: ts=4 expandtab syntax=python
