#!/usr/bin/env python -Es
"""Quantify expression from paired-end RNA-seq reads.

Trims adapters, aligns to the genome, sorts alignments and estimates
expression using a containerized WDL workflow run by Cromwell.

Usage:
  quantpipe.py {local,slurm} -r1 <read 1> -r2 <read 2> -o <outdir>
     -b sample base name (default derived from read 1)
     -t threads per task (default 2)
     -g annotation GTF in the reference directory
     -p prior strength (default 200000)
     -m maximum iterations (default 200)
     -c YAML system configuration
"""
from quantpipe.pipeline.main import main

if __name__ == "__main__":
    main()
