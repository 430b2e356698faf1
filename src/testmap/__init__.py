"""
testmap - ownership metadata for CI test results.

- testmap.core: resolution engine, snapshot codec, regression verifier
- testmap.components: declarative component rule files
- testmap.cli: ``testmap`` command line
"""

__version__ = "0.1.0"

from testmap.core import *  # noqa
