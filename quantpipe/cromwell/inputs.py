"""Create the concrete Cromwell inputs JSON from the packaged template.

The template marks values with `__key__` placeholders, one per RunConfig
field. String values are JSON escaped on substitution; numbers are written
as-is so templates can place them unquoted.
"""
import datetime
import json
import os
import re
import shutil

from quantpipe import utils
from quantpipe.log import logger
from quantpipe.pipeline import config_utils

TEMPLATE = "inputs.json"
PLACEHOLDER_RE = re.compile(r"__([A-Za-z][A-Za-z0-9]*(?:_[A-Za-z0-9]+)*)__")

class DescriptorError(ValueError):
    pass

def find_placeholders(txt):
    return set(PLACEHOLDER_RE.findall(txt))

def _to_json_str(val):
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        return json.dumps(str(val))[1:-1]
    return str(val)

def placeholder_values(values):
    """Names of string values that themselves contain `__key__` placeholder syntax.
    """
    return sorted(k for k, v in values.items()
                  if isinstance(v, str) and PLACEHOLDER_RE.search(v))

def substitute(template_txt, values):
    """Replace each `__key__` in template_txt with values[key].

    Raises DescriptorError naming placeholders without a value, or values that
    contain placeholder syntax, so nothing unresolved reaches the workflow engine.
    """
    unknown = sorted(k for k in find_placeholders(template_txt)
                     if k not in values or values[k] is None)
    if unknown:
        raise DescriptorError("No value for template placeholders: %s" %
                              ", ".join("__%s__" % k for k in unknown))
    clashes = placeholder_values(values)
    if clashes:
        raise DescriptorError("Values look like template placeholders: %s" % ", ".join(clashes))
    return PLACEHOLDER_RE.sub(lambda m: _to_json_str(values[m.group(1)]), template_txt)

def descriptor_file(run_config):
    return os.path.join(run_config.outdir, "%s-inputs.json" % run_config.basename)

def create(run_config, workspace, template_file=None):
    """Write the inputs descriptor for a run, pointing reads at workspace links.
    """
    if template_file is None:
        template_file = os.path.join(config_utils.get_definition_dir(), TEMPLATE)
    run_config = run_config._replace(read_1=workspace.read_1, read_2=workspace.read_2)
    try:
        with open(template_file) as in_handle:
            template_txt = in_handle.read()
    except OSError as e:
        raise DescriptorError("Could not read inputs template %s: %s" % (template_file, e))
    out_txt = substitute(template_txt, run_config._asdict())
    try:
        json.loads(out_txt)
    except ValueError as e:
        raise DescriptorError("Inputs from template %s are not valid JSON: %s" % (template_file, e))
    out_file = descriptor_file(run_config)
    try:
        if os.path.exists(out_file):
            with open(out_file) as in_handle:
                if in_handle.read() == out_txt:
                    return out_file
            backup_file = out_file + ".bak%s" % datetime.datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
            logger.info("Inputs changed since previous run, saving old inputs to %s" % backup_file)
            shutil.move(out_file, backup_file)
        return utils.write_atomic(out_file, out_txt)
    except OSError as e:
        raise DescriptorError("Could not write inputs %s: %s" % (out_file, e))
