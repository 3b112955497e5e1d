"""Run external commands, streaming their output into the run log.
"""
import collections
import subprocess

from quantpipe.log import logger, logger_cl

TAIL_LINES = 100

def run(cmd, descr=None, run_config=None, log_error=True, env=None):
    """Run a command given as a list of arguments, logging output and checking for errors.

    A non-zero exit raises CalledProcessError whose `cmd` carries the command
    line followed by the last lines of output.
    """
    cmd = [str(x) for x in cmd]
    if descr:
        logger.debug(_descr_str(descr, run_config))
    try:
        logger_cl.debug(" ".join(cmd))
        _do_run(cmd, env=env)
    except Exception:
        if log_error:
            logger.exception()
        raise

def _descr_str(descr, run_config):
    """Add the sample base name to a description string.
    """
    if run_config is not None and run_config.basename:
        descr = "{0} : {1}".format(descr, run_config.basename)
    return descr

def _do_run(cmd, env=None):
    s = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                         close_fds=True, env=env)
    debug_stdout = collections.deque(maxlen=TAIL_LINES)
    try:
        for line in s.stdout:
            line = line.decode("utf-8", errors="replace")
            if line.rstrip():
                debug_stdout.append(line)
                logger.debug(line.rstrip())
        exitcode = s.wait()
    except KeyboardInterrupt:
        s.terminate()
        s.wait()
        raise
    finally:
        s.stdout.close()
    if exitcode != 0:
        raise subprocess.CalledProcessError(exitcode, " ".join(cmd) + "\n" + "".join(debug_stdout))
