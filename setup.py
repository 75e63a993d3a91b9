#!/usr/bin/env python
import ast, re
from setuptools import setup
from pathlib import Path

# read the contents of the README file
long_description = (Path(__file__).parent / "README.md").read_text()

version_file = Path(__file__).parent / "readstream/_version.py"

# get metadata from _version.py
meta = {}
with open(version_file, "r") as f:
    rx = re.compile("(__version__) = (.*)")
    for line in f:
        m = rx.match(line)
        if m:
            meta[m.group(1)] = ast.literal_eval(m.group(2))
print(f"Installing readstream {meta['__version__']}")

setup(
    name="readstream",
    version=meta["__version__"],  # parsed from _version.py
    python_requires=">=3.10",
    license="Apache-2.0",
    description="Region-restricted, position-merged streaming of reads from indexed SAM/BAM/CRAM files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=["readstream"],
    scripts=["readstream/readstream"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
    ],
    install_requires=[
        "setuptools",
        "pysam",
        "pytest",
        "sortedcontainers",
        "tqdm",
    ],
)
