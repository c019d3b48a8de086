from setuptools import setup, find_packages

setup(
    name="simple-planner",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*", "scripts"]),
    install_requires=[
        "numpy>=1.21.0",
        "scipy>=1.7.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    author="Simple Planner Team",
    description="Occupancy grid global path planner with obstacle inflation and pluggable grid search",
    python_requires=">=3.8",
)
