"""
Setup file.
"""

import os

from setuptools import setup

URL = "https://github.com/appbin/appbin"
KEYWORDS = "embedded arm cortex-m cross-compiler firmware kernel userspace objcopy"
HERE = os.path.dirname(os.path.abspath(__file__))



if __name__ == "__main__":
    setup(
        keywords=KEYWORDS,
        url=URL,
        include_package_data=True)
