"""Setup script for hotcloud-timeline."""

from setuptools import setup, find_packages

setup(
    name="hotcloud-timeline",
    version="0.1.0",
    description="A SimPy-based generator of synthetic cluster telemetry with injected disruptions",
    author="Hotcloud Timeline",
    license="MIT",
    packages=find_packages(exclude=("tests", "tests.*")),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        "simpy>=4.0",
        "numpy>=1.22",
        "pandas>=1.5",
        "matplotlib>=3.5",
        "requests>=2.28",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "run-simulation=timeline.cli:main",
        ],
    },
)
