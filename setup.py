#!/usr/bin/env python3
"""
ECLSS Guard Setup Configuration
Life-support anomaly detection and diagnosis for crewed cabins
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("config/requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="eclss-guard",
    version="1.0.0",
    description="Anomaly scoring, fault diagnosis and spoken alerts for spacecraft life-support telemetry",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"eclss_guard.config": ["*.yaml"]},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "speech": ["pyttsx3>=2.90"],
        "test": ["pytest>=7.0", "pytest-asyncio>=0.21"],
    },
    entry_points={
        "console_scripts": [
            "eclss-guard=eclss_guard.cli:main",
        ],
    },
    include_package_data=True,
    keywords="eclss life-support anomaly-detection diagnosis telemetry spacecraft",
)
