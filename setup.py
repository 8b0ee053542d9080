#!/usr/bin/env python
from setuptools import find_packages, setup

about = {}
with open("src/psd_run/version.py") as f:
    exec(f.read(), about)

setup(
    name="psd-run",
    version=about["__version__"],
    description="Render layered PSD documents with runtime overrides.",
    license="MIT",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "attrs>=23.1.0",
        "numpy",
        "Pillow>=10.0.0",
        "psd-tools>=1.10.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["psd-run=psd_run.__main__:main"],
    },
)
