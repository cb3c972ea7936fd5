from setuptools import setup

setup(
    name="scriptr",
    version="0.1.0",
    description="Fast launcher for Rust single-file packages",
    packages=["scriptr"],
    python_requires=">=3.8",
    install_requires=["fasteners"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["scriptr=scriptr._cli:main"]},
)
