"""Centralize running of external commands, providing logging and tracking.
"""
import collections
import os
import signal
import subprocess
import tempfile
import threading

from seqhand.errors import ExternalToolError
from seqhand.log import logger, logger_cl


def run(cmd, descr=None, sample=None, region=None, log_error=True, env=None, timeout=None):
    """Run the provided command, logging details and checking for errors.

    Raises ExternalToolError when the command fails or runs longer than
    `timeout` seconds.
    """
    if descr:
        descr = _descr_str(descr, sample, region)
        logger.debug(descr)
    try:
        logger_cl.debug(" ".join(str(x) for x in cmd) if not isinstance(cmd, str) else cmd)
        _do_run(cmd, env=env, timeout=timeout)
    except Exception:
        if log_error:
            logger.exception()
        raise

def run_background(cmd, descr=None, sample=None, env=None):
    """Start a command in the background, in its own process group.

    Used for streaming producers feeding named pipes. Output goes to an
    anonymous temporary file retrievable with `background_output`. The caller
    owns the returned process and must wait on or terminate it.
    """
    if descr:
        descr = _descr_str(descr, sample, None)
        logger.debug(descr)
    cmd, shell_arg, executable_arg = _normalize_cmd_args(cmd)
    logger_cl.debug(" ".join(cmd) if not shell_arg else cmd)
    out_handle = tempfile.TemporaryFile()
    p = subprocess.Popen(
        cmd,
        shell=shell_arg,
        executable=executable_arg,
        stdin=subprocess.DEVNULL,
        stdout=out_handle,
        stderr=subprocess.STDOUT,
        close_fds=True,
        start_new_session=True,
        env=env,
    )
    p.output_handle = out_handle
    return p

def background_output(p, maxlen=100):
    """Retrieve the last lines written by a background process.
    """
    handle = getattr(p, "output_handle", None)
    if handle is None or handle.closed:
        return ""
    handle.seek(0)
    lines = collections.deque((line.decode("utf-8", errors="replace") for line in handle),
                              maxlen=maxlen)
    return "".join(lines)

def kill_background(p):
    """Terminate a background process group, if still running.
    """
    if p.poll() is None:
        try:
            os.killpg(p.pid, signal.SIGKILL)
        except OSError:
            pass
    p.wait()
    handle = getattr(p, "output_handle", None)
    if handle is not None:
        handle.close()

def _descr_str(descr, sample, region):
    """Add additional useful information from the sample to description string.
    """
    if sample:
        descr = "{0} : {1}".format(descr, sample)
    if region:
        descr = "{0} : {1}".format(descr, region)
    return descr

def find_bash():
    for test_bash in [find_cmd("bash"), "/bin/bash", "/usr/bin/bash", "/usr/local/bin/bash"]:
        if test_bash and os.path.exists(test_bash):
            return test_bash
    raise IOError("Could not find bash in any standard location. Needed for unix pipes")

def find_cmd(cmd):
    try:
        return subprocess.check_output(["which", cmd]).decode().strip()
    except subprocess.CalledProcessError:
        return None

def _normalize_cmd_args(cmd):
    """Normalize subprocess arguments to handle list commands, string and pipes.
    Piped commands set pipefail and require use of bash to help with debugging
    intermediate errors.
    """
    if isinstance(cmd, str):
        # check for standard or anonymous named pipes
        if cmd.find(" | ") > 0 or cmd.find(">(") >= 0 or cmd.find("<(") >= 0:
            return "set -o pipefail; " + cmd, True, find_bash()
        else:
            return cmd, True, None
    else:
        return [str(x) for x in cmd], False, None

def _do_run(cmd, env=None, timeout=None):
    """Perform running and check results, raising errors for issues.
    """
    cmd, shell_arg, executable_arg = _normalize_cmd_args(cmd)
    s = subprocess.Popen(
        cmd,
        shell=shell_arg,
        executable=executable_arg,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        close_fds=True,
        start_new_session=timeout is not None,
        env=env,
    )
    timer = None
    timed_out = threading.Event()
    if timeout is not None:
        def _expire():
            timed_out.set()
            try:
                os.killpg(s.pid, signal.SIGKILL)
            except OSError:
                pass
        timer = threading.Timer(max(timeout, 0), _expire)
        timer.daemon = True
        timer.start()
    debug_stdout = collections.deque(maxlen=100)
    try:
        for line in iter(s.stdout.readline, b""):
            line = line.decode("utf-8", errors="replace")
            if line.rstrip():
                debug_stdout.append(line)
                logger.debug(line.rstrip())
        exitcode = s.wait()
    finally:
        if timer is not None:
            timer.cancel()
        s.stdout.close()
    # a clean exit wins over a timer that fired after the process finished
    if exitcode != 0:
        raise ExternalToolError(exitcode, cmd, "".join(debug_stdout), timed_out=timed_out.is_set())
