#!/usr/bin/env python

"""Setup file and install script for the quantpipe RNA-seq launcher"""

import os
import subprocess

import setuptools

VERSION = '0.3.0'

# add quantpipe version number and git commit hash of the current revision to version.py
try:
    git_run = subprocess.run(['git', 'rev-parse', '--short', 'HEAD'], stdout=subprocess.PIPE,
                             stderr=subprocess.DEVNULL)
    git_run.check_returncode()
except (OSError, subprocess.SubprocessError):
    commit_hash = ''
else:
    commit_hash = git_run.stdout.strip().decode()

here = os.path.dirname(os.path.abspath(__file__))
with open(os.path.join(here, 'quantpipe', 'pipeline', 'version.py'), 'w') as version_file:
    version_file.writelines([f'__version__ = "{VERSION}"\n',
                             f'__git_revision__ = "{commit_hash}"\n'])

# trimming, alignment and quantification tools run from containers pulled by
# the workflow; Cromwell and Singularity are installed on the host
setuptools.setup(
    name='quantpipe',
    version=VERSION,
    description='Launch containerized paired-end RNA-seq quantification with Cromwell',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    package_data={'quantpipe': ['definition/*.wdl', 'definition/*.json', 'definition/*.yaml',
                                'definition/backends/*.conf']},
    scripts=['scripts/quantpipe.py'],
    entry_points={'console_scripts': ['quantpipe = quantpipe.pipeline.main:main']},
    install_requires=['logbook', 'toolz', 'PyYAML'],
    extras_require={'test': ['pytest', 'pytest-mock', 'mock']},
    python_requires='>=3.8',
)
