"""Run the staged workflow with Cromwell.

Cromwell runs inside the workspace so its execution directories stay with
the run. The container cache is also scoped to the workspace.
"""
import json
import os
import shutil
import subprocess

from quantpipe import utils
from quantpipe.cromwell import hpc
from quantpipe.log import logger
from quantpipe.pipeline import run_info
from quantpipe.provenance import do

class WorkflowFailed(Exception):
    pass

def metadata_file(run_config):
    return os.path.join(run_config.outdir, "%s-metadata.json" % run_config.basename)

def engine_env(workspace, config, env=None):
    """Environment for Cromwell, pointing the container cache into the workspace.
    """
    env = dict(os.environ if env is None else env)
    env[utils.get_in(config, ("container", "cache_env"), "SINGULARITY_CACHEDIR")] = workspace.cache_dir
    return env

def cromwell_cmd(run_config, workspace, config, descriptor):
    backend = hpc.get_backend(run_config.backend)
    return [utils.get_in(config, ("cromwell", "cmd"), "cromwell"),
            "-Xms1g", "-Xmx%s" % utils.get_in(config, ("cromwell", "memory"), "3g"),
            "run",
            "-Dconfig.file=%s" % hpc.config_path(backend, workspace.backend_dir),
            "--inputs", descriptor,
            "--metadata-output", metadata_file(run_config),
            workspace.workflow]

def run(run_config, workspace, config, descriptor):
    """Run Cromwell to completion and publish the final report.

    A failing Cromwell exit propagates as CalledProcessError.
    """
    backend = hpc.get_backend(run_config.backend)
    env = engine_env(workspace, config)
    hpc.check_programs(backend, config, env)
    cmd = cromwell_cmd(run_config, workspace, config, descriptor)
    with utils.chdir(workspace.outdir):
        try:
            do.run(cmd, "Running workflow with %s backend" % backend.name, run_config,
                   log_error=False, env=env)
        except subprocess.CalledProcessError:
            _cromwell_debug(metadata_file(run_config))
            raise
    metadata = _read_metadata(metadata_file(run_config))
    if metadata.get("status") != "Succeeded":
        _cromwell_debug(metadata_file(run_config))
        raise WorkflowFailed("Cromwell finished with status %s" % metadata.get("status"))
    return _move_report(metadata, run_config)

def _read_metadata(in_file):
    if not utils.file_exists(in_file):
        raise WorkflowFailed("Cromwell did not write run metadata to %s" % in_file)
    with open(in_file) as in_handle:
        return json.load(in_handle)

def _cromwell_debug(in_file):
    """Format Cromwell failures to make debugging easier.
    """
    def get_failed_calls(cur, key=None):
        if key is None: key = []
        out = []
        if isinstance(cur, dict) and "failures" in cur and "callRoot" in cur:
            out.append((key, cur))
        elif isinstance(cur, dict):
            for k, v in cur.items():
                out.extend(get_failed_calls(v, key + [k]))
        elif isinstance(cur, (list, tuple)):
            for i, v in enumerate(cur):
                out.extend(get_failed_calls(v, key + [i]))
        return out
    if not utils.file_exists(in_file):
        logger.error("Failed Cromwell run, no metadata available in %s" % in_file)
        return
    with open(in_file) as in_handle:
        metadata = json.load(in_handle)
    logger.error("Failed Cromwell run")
    for fail_k, fail_call in get_failed_calls(metadata.get("calls", {})):
        logger.error("Failure in step: %s" % ".".join([str(x) for x in fail_k]))
        logger.error("  stderr             : %s" % fail_call.get("stderr", ""))
        logger.error("  Cromwell directory : %s" % fail_call["callRoot"])

def _move_report(metadata, run_config):
    """Copy the workflow report to its stable location in the workspace.
    """
    report = [v for k, v in metadata.get("outputs", {}).items() if k.split(".")[-1] == "report"]
    if not report or not report[0] or not os.path.exists(report[0]):
        raise WorkflowFailed("Cromwell finished without a report output for %s" % run_config.basename)
    out_file = run_info.report_file(run_config)
    try:
        utils.safe_makedir(os.path.dirname(out_file))
        shutil.copyfile(report[0], out_file)
    except OSError as e:
        raise WorkflowFailed("Could not copy report %s to %s: %s" % (report[0], out_file, e))
    logger.info("Expression report for %s: %s" % (run_config.basename, out_file))
    return out_file
