#!python

import os.path
import sys

from setuptools import find_packages, setup

sys.path.insert(0, os.path.abspath("src"))
from regexec import versionstring

if __name__ == "__main__":
    setup(
        name="regexec",
        version=versionstring(),
        package_dir={"": "src"},
        packages=find_packages("src"),
        description="NFA execution engine for regular-expression matchers, with eagerly maintained epsilon-closures.",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        license="Two-clause BSD license",
        keywords="nfa automaton regex epsilon closure",
        zip_safe=True,
        python_requires=">=3.8",
        install_requires=[
            "loguru>=0.7.2",
        ],
        extras_require={
            "test": [
                "pytest>=8.3.2",
            ],
        },
        classifiers=[
            "Programming Language :: Python :: 3",
            "Development Status :: 3 - Alpha",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: BSD License",
            "Natural Language :: English",
            "Operating System :: OS Independent",
            "Programming Language :: Python :: 3.8",
            "Programming Language :: Python :: 3.9",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Software Development :: Libraries :: Python Modules",
            "Topic :: Text Processing",
        ],
    )
