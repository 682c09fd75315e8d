"""
Setup script for ReliaTrack
"""

from pathlib import Path
from setuptools import setup, find_packages

# Read requirements
requirements = []
req_file = Path(__file__).parent / "requirements.txt"
if req_file.exists():
    with open(req_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                requirements.append(line)

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    with open(readme_file) as f:
        long_description = f.read()

setup(
    name="reliatrack",
    version="1.0.0",
    author="ReliaTrack",
    description="Multi-tenant maintenance management and reliability analysis API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["reliatrack", "reliatrack.*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        'test': [
            'pytest>=7.4',
            'aiosqlite>=0.19',
        ],
    },
    python_requires=">=3.10",
    entry_points={
        'console_scripts': [
            'reliatrack=reliatrack.main:run',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Intended Audience :: Manufacturing",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
