# This file is part of bootdev. See LICENSE for copyright and license info.

# The 'FEATURES' variable is provided so that users of bootdev
# can determine which features are supported.  Each entry should have
# a consistent meaning.
FEATURES = [
    # boot sectors are saved before any disk is modified
    'BOOT_RECORD_BACKUP',
    # generic boot code is chosen per disk from its partition table kind
    'GENERIC_MBR_PER_DISK',
    # multipath maps are preferred over their wire legs
    'MULTIPATH_KERNEL_NAMES',
    # topology config is validated against a schema
    'STORAGE_CONFIG_SCHEMA',
]

__version__ = "1.0"

# vi: ts=4 expandtab syntax=python
