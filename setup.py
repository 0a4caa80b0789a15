#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
A minimal setup.py that defers to pyproject.toml for configuration.
It exists for packaging tools that still invoke setup.py directly.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
