"""Naming helpers for paired-end fastq inputs.
"""
import collections
import os

MateSuffix = collections.namedtuple("MateSuffix", "suffix mate")

# Checked in order; the first hit is the only suffix removed. Illumina
# bcl2fastq names come first so `_R1_001` is not cut down to `_R1_00`.
MATE_SUFFIXES = [MateSuffix("_R1_001", 1), MateSuffix("_R2_001", 2),
                 MateSuffix("_R1", 1), MateSuffix("_R2", 2),
                 MateSuffix(".R1", 1), MateSuffix(".R2", 2),
                 MateSuffix("-R1", 1), MateSuffix("-R2", 2),
                 MateSuffix("_1", 1), MateSuffix("_2", 2),
                 MateSuffix(".1", 1), MateSuffix(".2", 2),
                 MateSuffix("-1", 1), MateSuffix("-2", 2)]

COMPRESSION_EXTS = (".gz", ".bz2", ".zip")
FASTQ_EXTS = (".fastq", ".fq")

def _strip_ext(name, exts):
    for ext in exts:
        if name.lower().endswith(ext):
            return name[:len(name) - len(ext)]
    return name

def strip_fastq_ext(fname):
    """Remove directory, compression and fastq extensions from a read file name.
    """
    name = _strip_ext(os.path.basename(fname), COMPRESSION_EXTS)
    return _strip_ext(name, FASTQ_EXTS)

def find_mate_suffix(name):
    """Return the first MateSuffix in priority order matching the end of name.

    A suffix making up the whole name does not count as a match.
    """
    for mate_suffix in MATE_SUFFIXES:
        if name.endswith(mate_suffix.suffix) and len(name) > len(mate_suffix.suffix):
            return mate_suffix
    return None

def sample_basename(fname):
    """Derive the sample base name from a read 1 file name.

    S25_WT_1.fastq.gz -> S25_WT
    """
    name = strip_fastq_ext(fname)
    mate_suffix = find_mate_suffix(name)
    if mate_suffix:
        name = name[:len(name) - len(mate_suffix.suffix)]
    return name
