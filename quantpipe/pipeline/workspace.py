"""Prepare a self-contained output directory for a run.

The workspace holds links to the input reads, a frozen copy of the workflow
definition and backend configurations, and a record of the resolved run
configuration. Re-initializing an existing workspace refreshes these in place.
"""
import collections
import errno
import os

import yaml

from quantpipe import utils
from quantpipe.log import logger
from quantpipe.pipeline import config_utils, run_info

Workspace = collections.namedtuple("Workspace", "outdir read_1 read_2 workflow backend_dir "
                                                "config_file cache_dir")

WORKFLOW = "workflow.wdl"
BACKEND_DIR = "backends"

class WorkspaceError(Exception):
    pass

def setup(run_config, config):
    """Create or refresh the workspace for run_config, returning a Workspace.
    """
    outdir = _make_outdir(run_config.outdir)
    read_1, read_2 = [_link_input(f, outdir) for f in [run_config.read_1, run_config.read_2]]
    workflow, backend_dir = _stage_definition(outdir)
    cache_dir = _safe_makedir(os.path.join(outdir, utils.get_in(config, ("container", "cache_dir"),
                                                                "singularity_cache")))
    config_file = _write_run_config(run_config, outdir)
    logger.info("Initialized workspace %s for %s" % (outdir, run_config.basename))
    return Workspace(outdir, read_1, read_2, workflow, backend_dir, config_file, cache_dir)

def _make_outdir(outdir):
    if os.path.exists(outdir) and not os.path.isdir(outdir):
        raise WorkspaceError("Output directory %s exists and is not a directory" % outdir)
    return _safe_makedir(outdir)

def _safe_makedir(dname):
    try:
        return utils.safe_makedir(dname)
    except OSError as e:
        raise WorkspaceError("Could not create directory %s: %s. %s" %
                             (dname, e.strerror or e, _likely_cause(e)))

def _likely_cause(e):
    if e.errno in (errno.EACCES, errno.EPERM):
        return "Check you have write permission on the parent directory."
    elif e.errno == errno.EROFS:
        return "The parent directory is on a read-only filesystem."
    elif e.errno == errno.ENOSPC:
        return "The filesystem is out of space."
    return "Check the path is valid and writable."

def _link_input(in_file, outdir):
    """Link an input read into the workspace by its file name.
    """
    link = os.path.join(outdir, os.path.basename(in_file))
    try:
        return utils.symlink_abs(in_file, link)
    except (OSError, RuntimeError) as e:
        raise WorkspaceError("Could not link input %s to %s: %s" % (in_file, link, e))

def _stage_definition(outdir):
    """Copy the workflow definition and backend configurations into the workspace.
    """
    definition_dir = config_utils.get_definition_dir()
    workflow = os.path.join(outdir, WORKFLOW)
    backend_dir = os.path.join(outdir, BACKEND_DIR)
    try:
        utils.write_atomic(workflow, _read(os.path.join(definition_dir, WORKFLOW)))
        utils.copy_tree(os.path.join(definition_dir, BACKEND_DIR), backend_dir)
    except OSError as e:
        raise WorkspaceError("Could not stage pipeline definition into %s: %s" % (outdir, e))
    return workflow, backend_dir

def _write_run_config(run_config, outdir):
    config_dir = _safe_makedir(os.path.join(outdir, "config"))
    out_file = os.path.join(config_dir, "%s-run.yaml" % run_config.basename)
    try:
        utils.write_atomic(out_file, yaml.safe_dump(run_info.to_dict(run_config),
                                                    default_flow_style=False, allow_unicode=False))
    except OSError as e:
        raise WorkspaceError("Could not write run configuration %s: %s" % (out_file, e))
    return out_file

def _read(fname):
    with open(fname) as in_handle:
        return in_handle.read()
