#!/usr/bin/env python

"""Setup file and install script for the tumor/normal BAM processing graph builder"""

import os
import subprocess

import setuptools

VERSION = '0.3.0'

# add version number and git commit hash of the current revision to version.py
try:
    git_run = subprocess.run(['git', 'rev-parse', '--short', 'HEAD'], stdout=subprocess.PIPE,
                             stderr=subprocess.DEVNULL)
    git_run.check_returncode()
except (subprocess.SubprocessError, OSError):
    commit_hash = ''
else:
    commit_hash = git_run.stdout.strip().decode()

here = os.path.dirname(os.path.abspath(__file__))
with open(os.path.join(here, 'cmibam', 'pipeline', 'version.py'), 'w') as version_file:
    version_file.writelines([f'__version__ = "{VERSION}"\n',
                             f'__git_revision__ = "{commit_hash}"\n'])

setuptools.setup(name='cmibam',
                 version=VERSION,
                 description='Build tumor/normal BAM processing task graphs from sequencing lane metadata',
                 packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
                 scripts=['scripts/cmibam_pipeline.py'],
                 python_requires='>=3.6',
                 install_requires=['logbook', 'PyYAML', 'six', 'toolz'],
                 extras_require={'test': ['mock', 'pytest', 'pytest-mock']})
