#!/usr/bin/python3
# Setup file for lfsclient
# Copyright (C) 2026 The lfsclient authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

# Project metadata lives in pyproject.toml.
setup(
    package_data={"": ["py.typed"]},
)
