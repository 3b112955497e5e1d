"""Helpful utilities for building analysis pipelines.
"""
import contextlib
import os
import shutil
import tempfile
import time

import toolz as tz
import yaml


def safe_makedir(dname):
    """Make a directory if it doesn't exist, handling concurrent race conditions.
    """
    if not dname:
        return dname
    num_tries = 0
    max_tries = 5
    while not os.path.exists(dname):
        # we could get an error here if multiple processes are creating
        # the directory at the same time. Grr, concurrency.
        try:
            os.makedirs(dname)
        except OSError:
            if num_tries > max_tries:
                raise
            num_tries += 1
            time.sleep(2)
    return dname

@contextlib.contextmanager
def chdir(new_dir):
    """Context manager to temporarily change to a new directory.
    """
    cur_dir = os.getcwd()
    safe_makedir(new_dir)
    os.chdir(new_dir)
    try:
        yield
    finally:
        os.chdir(cur_dir)

def file_exists(fname):
    """Check if a file exists and is non-empty.
    """
    try:
        return fname and os.path.exists(fname) and os.path.getsize(fname) > 0
    except OSError:
        return False

def remove_safe(f):
    try:
        if os.path.isdir(f) and not os.path.islink(f):
            shutil.rmtree(f)
        else:
            os.remove(f)
    except OSError:
        pass

def symlink_abs(orig, new):
    """Point `new` at the absolute path of `orig`, replacing any stale link.

    Returns the absolute path of the link. An existing `new` that already
    resolves to the same file as `orig` is kept, so inputs living inside the
    link directory, or links from a previous run, are never removed.
    """
    orig = os.path.abspath(orig)
    new = os.path.abspath(new)
    if not os.path.exists(orig):
        raise RuntimeError("File not found: %s" % orig)
    if orig == new or (os.path.exists(new) and os.path.samefile(orig, new)):
        return new
    if os.path.lexists(new):
        remove_safe(new)
    os.symlink(orig, new)
    return new

def copy_tree(orig_dir, new_dir):
    """Copy a directory tree, overwriting files from a previous copy.
    """
    shutil.copytree(orig_dir, new_dir, dirs_exist_ok=True)
    return new_dir

def write_atomic(out_file, content):
    """Write text to a temporary file next to `out_file` and move into place.
    """
    out_dir = os.path.dirname(os.path.abspath(out_file))
    (fd, tx_file) = tempfile.mkstemp(dir=out_dir, prefix=".%s-" % os.path.basename(out_file))
    try:
        with os.fdopen(fd, "w") as out_handle:
            out_handle.write(content)
        os.replace(tx_file, out_file)
    except BaseException:
        remove_safe(tx_file)
        raise
    return out_file

def merge_config_files(fnames):
    """Merge configuration files, preferring definitions in latter files.
    """
    def _load_yaml(fname):
        with open(fname) as in_handle:
            config = yaml.safe_load(in_handle)
        if config and not isinstance(config, dict):
            raise ValueError("Expected a YAML mapping of settings in %s" % fname)
        return config or {}
    out = _load_yaml(fnames[0])
    for fname in fnames[1:]:
        out = tz.merge_with(_merge_values, out, _load_yaml(fname))
    return out

def _merge_values(vals):
    if all(isinstance(v, dict) for v in vals):
        return tz.merge_with(_merge_values, *vals)
    return vals[-1]

def get_in(d, t, default=None):
    """
    look up if you can get a tuple of values from a nested dictionary,
    each item in the tuple a deeper layer

    example: get_in({1: {2: 3}}, (1, 2)) -> 3
    example: get_in({1: {2: 3}}, (2, 3)) -> {}
    """
    return tz.get_in(t, d, default)

def which(program, env=None):
    """ returns the path to an executable or None if it can't be found"""
    if env is None:
        env = os.environ.copy()

    def is_exe(fpath):
        return os.path.isfile(fpath) and os.access(fpath, os.X_OK)

    fpath, fname = os.path.split(program)
    if fpath:
        if is_exe(program):
            return program
    else:
        for path in env.get("PATH", "").split(os.pathsep):
            exe_file = os.path.join(path, program)
            if is_exe(exe_file):
                return exe_file
    return None

def get_abspath(path, pardir=None):
    if pardir is None:
        pardir = os.getcwd()
    path = os.path.expandvars(os.path.expanduser(path))
    return os.path.normpath(os.path.join(pardir, path))
