"""Resolve command line arguments into the configuration for a single run.
"""
import collections
import os

from quantpipe import fastq, utils
from quantpipe.cromwell import inputs

RUN_KEYS = ["read_1", "read_2", "outdir", "basename", "threads", "gtf",
            "prior", "max_iter", "backend", "reference_dir"]

RunConfig = collections.namedtuple("RunConfig", RUN_KEYS)

REQUIRED = [("read_1", "-r1/--read-1"), ("read_2", "-r2/--read-2"), ("outdir", "-o/--outdir")]

def resolve(args, config):
    """Build a RunConfig from parsed arguments and the system configuration.

    Unset optional arguments fall back to the `defaults` section of the
    system configuration. Read and output paths are made absolute.
    """
    missing = [flag for key, flag in REQUIRED if not getattr(args, key, None)]
    if missing:
        raise ValueError("Missing required argument: %s" % ", ".join(missing))
    defaults = config.get("defaults", {})

    def _get(key):
        val = getattr(args, key, None)
        return val if val is not None else defaults.get(key)
    read_1 = utils.get_abspath(args.read_1)
    basename = args.basename or fastq.sample_basename(read_1)
    return RunConfig(read_1=read_1,
                     read_2=utils.get_abspath(args.read_2),
                     outdir=utils.get_abspath(args.outdir),
                     basename=basename,
                     threads=int(_get("threads")),
                     gtf=_get("gtf"),
                     prior=int(_get("prior")),
                     max_iter=int(_get("max_iter")),
                     backend=args.backend,
                     reference_dir=config.get("reference_dir"))

def check_inputs(run_config):
    """Return an error message for missing read files or unusable values.
    """
    clashes = inputs.placeholder_values(to_dict(run_config))
    if clashes:
        return ("Values for %s contain `__name__` template placeholder syntax: %s" %
                (", ".join(clashes), ", ".join(str(getattr(run_config, k)) for k in clashes)))
    for key in ["read_1", "read_2"]:
        fname = getattr(run_config, key)
        if not os.path.isfile(fname):
            return "Input %s file not found: %s" % (key.replace("_", "-"), fname)
    if os.path.basename(run_config.read_1) == os.path.basename(run_config.read_2):
        return ("Input read-1 and read-2 share the file name %s; rename one so both "
                "can be linked into %s" % (os.path.basename(run_config.read_1), run_config.outdir))

def to_dict(run_config):
    return dict(zip(run_config._fields, run_config))

def report_file(run_config):
    """Final tab separated report location for a run.
    """
    return os.path.join(run_config.outdir, "quantification", run_config.basename, "expression.tsv")
