"""Loads system configuration from .yaml files and expands environment variables.
"""
import os

import yaml

from quantpipe import utils


class CmdNotFound(Exception):
    pass

SYSTEM_CONFIG = "quantpipe_system.yaml"

def get_definition_dir():
    """Directory holding the packaged workflow, inputs template and backends.
    """
    return os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                        "definition")

def load_system_config(config_file=None):
    """Load the packaged quantpipe_system.yaml, merging a user supplied file on top.

    Values from the user file win; nested dictionaries are merged key by key.
    """
    base_config = os.path.join(get_definition_dir(), SYSTEM_CONFIG)
    if config_file is None:
        config = load_config(base_config)
    else:
        if not os.path.exists(config_file):
            raise ValueError("Could not find input system configuration file %s" % config_file)
        try:
            config = utils.merge_config_files([base_config, config_file])
        except (yaml.YAMLError, OSError) as e:
            raise ValueError("Could not read system configuration file %s: %s" % (config_file, e))
        config = _expand_paths(config)
    config["quantpipe_system"] = config_file or base_config
    return config

def load_config(config_file):
    """Load YAML config file, replacing environmental variables.
    """
    with open(config_file) as in_handle:
        config = yaml.safe_load(in_handle) or {}
    return _expand_paths(config)

def _expand_paths(config):
    for field, setting in config.items():
        if isinstance(setting, dict):
            config[field] = _expand_paths(setting)
        elif isinstance(setting, str):
            config[field] = os.path.expandvars(setting)
    return config

def get_program(name, config, ptype="cmd"):
    """Retrieve program information from the configuration.

    Handles back-compatible plain string definitions alongside
    dictionaries of `cmd` and other settings.
    """
    pconfig = config.get(name, {})
    if isinstance(pconfig, str):
        pconfig = {"cmd": pconfig}
    if ptype == "cmd":
        return pconfig.get("cmd", name)
    elif ptype in pconfig:
        return pconfig[ptype]
    else:
        raise ValueError("Don't understand program type: %s for %s" % (ptype, name))

def check_program(cmd, env=None):
    """Ensure an executable is available, raising CmdNotFound otherwise.
    """
    path = utils.which(cmd, env)
    if path is None:
        raise CmdNotFound("Could not find `%s` on the PATH. Load the environment "
                          "module or install the tool before running." % cmd)
    return path
