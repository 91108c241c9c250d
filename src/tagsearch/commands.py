import shlex
import subprocess
import sys

from .errors import CommandError

FILE_PLACEHOLDER = "#FILE#"


def format_command(command, path):
    return command.replace(FILE_PLACEHOLDER, shlex.quote(str(path)))


def _shell_args(command):
    if sys.platform == "win32":
        return ["cmd", "/C", command]

    return ["/bin/bash", "-c", command]


def _run(path, command, **kw):
    command = format_command(command, path)

    try:
        return subprocess.run(_shell_args(command), **kw)
    except OSError as e:
        raise CommandError("wasn't able to execute command '{}': {}".format(command, e)) from e


def execute_command_on_file(path, command):
    """
    Runs `command` with every #FILE# replaced by `path` and returns
    whatever it wrote to stdout.
    """
    cp = _run(path, command, stdout=subprocess.PIPE)

    return cp.stdout.decode("utf-8", errors="replace")


def execute_filter_command_on_file(path, command):
    """
    Runs `command` with every #FILE# replaced by `path` and tells whether
    it exited successfully.
    """
    cp = _run(path, command, stdout=subprocess.DEVNULL)

    return cp.returncode == 0
