#!/usr/bin/env python

"""
| Copyright (C) 2012 Philip Axer
| TU Braunschweig, Germany
| All rights reserved

:Authors:
         - Philip Axer

Description
-----------

Setup
"""


from setuptools import setup

setup(name='pyblocking',
      version='1.0',
      description='pyBlocking - blocking bounds for multiprocessor real-time locking protocols',
      author='Jonas Diemer, Philip Axer, Daniel Thiele, Johannes Schlatow',
      author_email='{axer, diemer,thiele,schlatow}@ida.ing.tu-bs,de',
      license="MIT",
      packages=['pyblocking'],
      python_requires='>=3.6',
      install_requires=[],
      extras_require={'test': 'pytest'}
     )
