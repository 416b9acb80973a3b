from setuptools import setup, find_packages

setup(
    name="orbit-score",
    version="2.1.0",
    packages=find_packages(include=["orbit_score", "orbit_score.*"]),
    install_requires=[
        "pandas>=2.0",
        "numpy>=1.24",
        "matplotlib>=3.7",
        "seaborn>=0.13",
        "reportlab>=4.0",
        "python-dateutil>=2.8",
        "pyaml>=23.7",
        "PyYAML>=6.0",
        "openpyxl>=3.1",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "orbit-score=orbit_score.cli:main",
        ],
    },
    python_requires=">=3.8",
    description="Surgeon performance scoring engine (ORbit Score) with Markdown / PDF scorecards",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Healthcare Industry",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ]
)
