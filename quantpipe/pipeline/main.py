"""Main entry point for paired-end RNA-seq quantification runs.

Resolves arguments, initializes the workspace, writes the Cromwell inputs
and runs the workflow on the selected backend.
"""
import argparse
import subprocess
import sys

from quantpipe.cromwell import hpc, inputs, tool
from quantpipe.log import logger, setup_local_logging, setup_script_logging
from quantpipe.pipeline import config_utils, run_info, version, workspace

class HelpArgParser(argparse.ArgumentParser):
    """Report usage errors with the full help text and exit status 1.
    """
    def error(self, message):
        sys.stderr.write("error: %s\n" % message)
        self.print_help(sys.stderr)
        sys.exit(1)

def _positive_int(val):
    try:
        ival = int(val)
    except ValueError:
        raise argparse.ArgumentTypeError("expected an integer, got %s" % val)
    if ival < 1:
        raise argparse.ArgumentTypeError("expected a positive integer, got %s" % val)
    return ival

def _nonnegative_int(val):
    try:
        ival = int(val)
    except ValueError:
        raise argparse.ArgumentTypeError("expected an integer, got %s" % val)
    if ival < 0:
        raise argparse.ArgumentTypeError("expected zero or a positive integer, got %s" % val)
    return ival

def setup_args(parser):
    parser.add_argument("backend", choices=list(hpc.BACKENDS.keys()),
                        help="Execution backend: serial local run or Slurm cluster submission")
    parser.add_argument("-r1", "--read-1", dest="read_1", required=True,
                        help="Read 1 fastq file (optionally gzipped)")
    parser.add_argument("-r2", "--read-2", dest="read_2", required=True,
                        help="Read 2 fastq file (optionally gzipped)")
    parser.add_argument("-o", "--outdir", required=True,
                        help="Output directory for the run workspace and results")
    parser.add_argument("-b", "--basename",
                        help="Sample name for output files. Defaults to the read 1 "
                             "file name without extensions and mate suffix")
    parser.add_argument("-t", "--threads", type=_positive_int,
                        help="Threads per task (default 2)")
    parser.add_argument("-g", "--gtf",
                        help="Annotation GTF file name inside the reference directory "
                             "(default gencode.v38.annotation.gtf)")
    parser.add_argument("-p", "--prior", type=_nonnegative_int,
                        help="Prior strength for expression estimation (default 200000)")
    parser.add_argument("-m", "--max-iter", dest="max_iter", type=_positive_int,
                        help="Maximum estimation iterations (default 200)")
    parser.add_argument("-c", "--system-config", dest="system_config",
                        help="YAML system configuration overriding the packaged defaults")
    parser.add_argument("-v", "--version", action="version", version=version.__version__,
                        help="Print current version")
    return parser

def parse_cl_args(in_args):
    """Parse command line arguments, exiting with status 1 on usage errors.
    """
    parser = setup_args(HelpArgParser(
        description="Trim, align and quantify paired-end RNA-seq reads with Cromwell.",
        allow_abbrev=False))
    args = parser.parse_args(in_args)
    return parser, args

def run_main(args, parser=None):
    """Run a quantification from parsed arguments, returning the report file.
    """
    config = config_utils.load_system_config(args.system_config)
    run_config = run_info.resolve(args, config)
    error_msg = run_info.check_inputs(run_config)
    if error_msg:
        if parser:
            parser.error(error_msg)
        raise ValueError(error_msg)
    ws = workspace.setup(run_config, config)
    handler = setup_local_logging(config, ws.outdir)
    try:
        logger.info("Running %s with %s backend" % (run_config.basename, run_config.backend))
        descriptor = inputs.create(run_config, ws)
        return tool.run(run_config, ws, config, descriptor)
    finally:
        handler.pop_thread()
        handler.close()

def main(in_args=None):
    if in_args is None:
        in_args = sys.argv[1:]
    parser, args = parse_cl_args(in_args)
    handler = setup_script_logging()
    try:
        run_main(args, parser)
    except subprocess.CalledProcessError as e:
        logger.error("Workflow engine failed with exit status %s" % e.returncode)
        sys.exit(e.returncode or 1)
    except (workspace.WorkspaceError, inputs.DescriptorError, config_utils.CmdNotFound,
            tool.WorkflowFailed, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)
    finally:
        handler.pop_thread()

if __name__ == "__main__":
    main()
