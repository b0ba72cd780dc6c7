# This file is part of bootdev. See LICENSE for copyright and license info.

import argparse
import errno
import os
import platform
import subprocess

from .log import LOG

# uname machine -> the architecture names used in configs
_MACHINE_ARCH = {
    'i586': 'i386',
    'i686': 'i386',
    'x86_64': 'amd64',
    'ppc64le': 'ppc64el',
    'aarch64': 'arm64',
}


class ProcessExecutionError(IOError):
    """An external command failed to start or exited with a bad status."""

    MESSAGE_TMPL = ('%(description)s\n'
                    'Command: %(cmd)s\n'
                    'Exit code: %(exit_code)s\n'
                    'Reason: %(reason)s\n'
                    'Stdout: %(stdout)s\n'
                    'Stderr: %(stderr)s')
    indent = 8

    def __init__(self, stdout=None, stderr=None, exit_code=None, cmd=None,
                 description=None, reason=None):
        self.cmd = cmd or '-'
        self.description = (description or
                            'Unexpected error while running command.')
        self.exit_code = exit_code if isinstance(exit_code, int) else '-'
        self.stdout = self._indented(stdout)
        self.stderr = self._indented(stderr)
        self.reason = reason or '-'
        IOError.__init__(self, self.MESSAGE_TMPL % vars(self))

    def _indented(self, text):
        if not text:
            return "''"
        if isinstance(text, bytes):
            text = text.decode()
        return text.replace('\n', '\n' + ' ' * self.indent)


def _decode(data, errors):
    if not errors or not isinstance(data, bytes):
        return data
    return data.decode('utf-8', errors=errors)


def subp(args, data=None, rcs=None, capture=False, combine_capture=False,
         decode="replace"):
    """Run a command and wait for it.

    :param args: argv list, never run through a shell.
    :param data: bytes fed to the command's stdin, stdin is /dev/null
                 otherwise.
    :param rcs: accepted exit codes, [0] by default.
    :param capture: return stdout and stderr instead of passing them on.
    :param combine_capture: capture stderr into stdout.
    :param decode: errors mode for utf-8 decoding of captured output, or
                   False to return bytes.
    :raises: ProcessExecutionError if the command cannot be started or
             exits with a code not in rcs.
    :returns: (stdout, stderr), both None when nothing is captured.
    """
    if rcs is None:
        rcs = [0]
    args = [args] if isinstance(args, str) else list(args)
    LOG.debug("Running command %s with allowed return codes %s (capture=%s)",
              args, rcs, 'combine' if combine_capture else capture)

    stdout = stderr = None
    if capture:
        stdout = stderr = subprocess.PIPE
    if combine_capture:
        stdout, stderr = subprocess.PIPE, subprocess.STDOUT

    try:
        if data is None:
            with open(os.devnull) as devnull:
                proc = subprocess.Popen(args, stdin=devnull, stdout=stdout,
                                        stderr=stderr)
                out, err = proc.communicate()
        else:
            proc = subprocess.Popen(args, stdin=subprocess.PIPE,
                                    stdout=stdout, stderr=stderr)
            out, err = proc.communicate(data)
    except OSError as e:
        raise ProcessExecutionError(cmd=args, reason=e)

    if capture or combine_capture:
        out, err = out or b'', err or b''
    out, err = _decode(out, decode), _decode(err, decode)

    if proc.returncode not in rcs:
        raise ProcessExecutionError(stdout=out, stderr=err,
                                    exit_code=proc.returncode, cmd=args)
    return (out, err)


def load_command_environment(env=os.environ):
    """Settings handed to bootdev through BOOTDEV_* environment variables."""
    return {'config': env.get('BOOTDEV_CONFIG'),
            'mode': env.get('BOOTDEV_MODE')}


def ensure_dir(path, mode=None):
    try:
        os.makedirs(path or ".")
    except OSError as e:
        if e.errno != errno.EEXIST:
            raise
    if mode is not None:
        os.chmod(path, mode)


def is_exe(fpath):
    return os.path.isfile(fpath) and os.access(fpath, os.X_OK)


def which(program, search=None):
    """Return the full path of program, None when it is not executable."""
    if os.path.sep in program:
        return program if is_exe(program) else None

    if search is None:
        search = [p.strip('"') for p in
                  os.environ.get("PATH", "").split(os.pathsep)]

    for path in search:
        candidate = os.path.join(os.path.abspath(path), program)
        if is_exe(candidate):
            return candidate
    return None


class MergedCmdAppend(argparse.Action):
    """Keep -c and --set values in command line order as (flag, value)."""
    def __call__(self, parser, namespace, values, option_string=None):
        if getattr(namespace, self.dest, None) is None:
            setattr(namespace, self.dest, [])
        getattr(namespace, self.dest).append((option_string, values))


def get_platform_arch():
    machine = platform.machine()
    return _MACHINE_ARCH.get(machine, machine)


def is_ppc_arch(arch):
    """Return True for any PowerPC flavour (ppc, ppc64, ppc64el, ...)."""
    return bool(arch) and arch.startswith(('ppc', 'powerpc'))

# vi: ts=4 expandtab syntax=python
