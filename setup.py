from glob import glob

from setuptools import setup

import bootdev

setup(
    name="bootdev",
    description=('Block device name resolution and boot sector / partition '
                 'activation for BIOS bootloader installs'),
    version=bootdev.__version__,
    license="AGPL",
    packages=[
        'bootdev',
        'bootdev.block',
        'bootdev.commands',
    ],
    scripts=glob('bin/*'),
    python_requires='>=3.6',
    install_requires=[
        'attrs',
        'jsonschema',
        'PyYAML',
    ],
    extras_require={
        'test': [
            'mock',
            'parameterized',
            'pytest',
        ],
    },
)
