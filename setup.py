#!/usr/bin/env python
"""
Setup file for the pinvert package.
"""
import numpy as np
from Cython.Build import cythonize
from setuptools import Extension, find_packages, setup

# @@ CYTHON UTILITIES @@ #
# All of the cython extensions for the package have to be added
# here to ensure that they are accessible and installed on use.
sampling_utils = Extension(
    "pinvert.pinv._sampling_opt",
    sources=["pinvert/pinv/_sampling_opt.pyx"],
    language="c",
    libraries=["m"],
    include_dirs=[np.get_include()],
)

# Read the readme from /README.rst. As long as we are in the
# project directory, this should be accessible directly in path.
with open("README.rst", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Setup function
setup(
    name="pinvert",
    version="0.1.0",
    description="Random variate generation by polynomial interpolation of the inverse CDF.",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    setup_requires=[
        "numpy",
        "cython",
    ],  # Ensure numpy and cython are installed before setup
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"pinvert": ["bin/*.yaml"]},
    install_requires=[
        "numpy",
        "scipy",
        "cython",
        "tqdm",
        "ruamel.yaml",
        "sympy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    include_package_data=True,
    ext_modules=cythonize([sampling_utils]),
    python_requires=">=3.8",
)
