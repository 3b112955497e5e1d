"""Execution backends for running the workflow with Cromwell.

Each backend names a static Cromwell configuration shipped in the pipeline
definition and the external programs it needs on the PATH.
"""
import collections
import os

from quantpipe.pipeline import config_utils

Backend = collections.namedtuple("Backend", "name config_file programs")

BACKENDS = collections.OrderedDict([
    ("local", Backend("local", "local.conf", ["container"])),
    ("slurm", Backend("slurm", "slurm.conf", ["container", "slurm"])),
])

def get_backend(name):
    try:
        return BACKENDS[name]
    except KeyError:
        raise ValueError("Unsupported execution backend %s. Choose from: %s" %
                         (name, ", ".join(BACKENDS.keys())))

def config_path(backend, backend_dir):
    return os.path.join(backend_dir, backend.config_file)

def check_programs(backend, config, env=None):
    """Ensure Cromwell and the backend's programs are available.
    """
    programs = ["cromwell"] + backend.programs
    return [config_utils.check_program(config_utils.get_program(p, config), env)
            for p in programs]
