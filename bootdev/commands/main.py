# This file is part of bootdev. See LICENSE for copyright and license info.

import argparse
import importlib
import os
import sys
import traceback

from .. import config
from .. import log
from .. import util
from .. import __version__

SUB_COMMAND_MODULES = ['mbr-update', 'resolve']

# returned for any error escaping a sub command
ERROR_EXIT = 3


def add_subcmd(subparser, subcmd):
    modname = "bootdev.commands.%s" % subcmd.replace("-", "_")
    module = importlib.import_module(modname)
    popfunc = getattr(module, 'POPULATE_SUBCMD', None)
    if popfunc is None:
        raise AttributeError("No 'POPULATE_SUBCMD' in %s" % modname)
    popfunc(subparser.add_parser(subcmd))


def get_main_parser(stacktrace=False, verbosity=0):
    parser = argparse.ArgumentParser(prog='bootdev',
                                     epilog='Version %s' % __version__)
    parser.add_argument('--showtrace', action='store_true', default=stacktrace)
    parser.add_argument('-v', '--verbose', action='count', default=verbosity,
                        dest='verbosity')
    parser.add_argument('--log-file', default=sys.stderr,
                        type=argparse.FileType('w'))
    parser.add_argument('-c', '--config', action=util.MergedCmdAppend,
                        help='read configuration from cfg',
                        metavar='FILE', type=argparse.FileType("rb"),
                        dest='main_cfgopts', default=[])
    parser.add_argument('--set', action=util.MergedCmdAppend,
                        help=('define a config variable. key can be a "/" '
                              'delimited path ("bootloader/mbr_disk=/dev/sda")'
                              '. if key starts with "json:" then val is '
                              'loaded as json (json:bootloader/stage1/devices='
                              '"[\'/dev/sda\']")'),
                        metavar='key=val', dest='main_cfgopts')
    parser.set_defaults(config={})

    subps = parser.add_subparsers(dest="subcmd")
    for subcmd in SUB_COMMAND_MODULES:
        add_subcmd(subps, subcmd)
    return parser


def _env_flag(name, default="0"):
    return os.environ.get(name, default).lower() not in ("0", "false", "")


def _env_verbosity():
    try:
        return int(os.environ.get('BOOTDEV_VERBOSITY', "0"))
    except ValueError:
        return 1


def merged_config(args):
    """Merge -c files and --set values in the order they were given.

    Without either, the file named by BOOTDEV_CONFIG is used.
    """
    if not args.main_cfgopts:
        return config.load_command_config(args,
                                          util.load_command_environment())
    cfg = {}
    for flag, val in args.main_cfgopts:
        if flag == '--set':
            config.merge_cmdarg(cfg, val)
        else:
            with val:
                config.merge_config_fp(cfg, val)
    return cfg


def main(argv=None):
    parser = get_main_parser(stacktrace=_env_flag('BOOTDEV_STACKTRACE'),
                             verbosity=_env_verbosity())
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    args.config = cfg = merged_config(args)

    showtrace = args.showtrace
    if 'showtrace' in cfg:
        showtrace = str(cfg['showtrace']).lower() not in ("0", "false")
    verbosity = int(cfg.get('verbosity', args.verbosity))

    if not getattr(args, 'func', None):
        parser.print_help()
        sys.exit(1)

    log.basicConfig(stream=args.log_file, verbosity=verbosity)

    try:
        sys.exit(args.func(args))
    except Exception as e:
        if showtrace:
            traceback.print_exc()
        sys.stderr.write("%s\n" % e)
        sys.exit(ERROR_EXIT)


if __name__ == '__main__':
    sys.exit(main())

# vi: ts=4 expandtab syntax=python
