#! /usr/bin/env python
"""
setup.py for trajmd
"""

# System imports
import io
import re
from os import path
from setuptools import setup, find_packages

PACKAGES = find_packages(exclude=['tests*'])

THIS_DIRECTORY = path.abspath(path.dirname(__file__))

# versioning

ISRELEASED = False


def read_version():
    """
    Assemble the version from MAJOR/MINOR/MICRO in trajMD/__init__.py
    without importing the package.
    """
    with io.open(path.join(THIS_DIRECTORY, 'trajMD', '__init__.py')) as f:
        source = f.read()
    parts = [re.search(rf'^{name} = (\d+)', source, re.M).group(1)
             for name in ('MAJOR', 'MINOR', 'MICRO')]
    return '.'.join(parts)


VERSION = read_version()

with io.open(path.join(THIS_DIRECTORY, 'README.md')) as f:
    LONG_DESCRIPTION = f.read()

INFO = {
        'name': 'trajmd',
        'description': 'Streaming reader and writer for molecular '
                       'trajectory files (XYZ, Molden, GRO, XTC).',
        'packages': PACKAGES,
        'include_package_data': True,
        'python_requires': '>=3.10',
        'install_requires': ['numpy', 'ase', 'scipy>=1.9.3', 'tqdm',
                             'MDanalysis>=2.4.2'],
        'extras_require': {'test': ['pytest', 'pytest-mock']},
        'version': VERSION,
        'license': 'MIT',
        'long_description': LONG_DESCRIPTION,
        'long_description_content_type': 'text/markdown',
        'classifiers': ['Development Status :: 4 - Beta',
                        'Intended Audience :: Science/Research',
                        'License :: OSI Approved :: MIT License',
                        'Natural Language :: English',
                        'Operating System :: OS Independent',
                        'Programming Language :: Python :: 3.10',
                        'Topic :: Scientific/Engineering',
                        'Topic :: Scientific/Engineering :: Chemistry',
                        'Topic :: Scientific/Engineering :: Physics']
        }

####################################################################
# this is where setup starts
####################################################################


def setup_package():
    """
    Runs package setup
    """
    setup(**INFO)


if __name__ == '__main__':
    setup_package()
