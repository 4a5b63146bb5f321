from setuptools import setup, find_packages

setup(
    name="cluster_graph",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "scipy",
        "pandas",
        "numba",
        "pyroaring>=1.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    author="Connor Frankston",
    description="Bitmap-backed quality metrics and subset views for graph clusterings",
    python_requires=">=3.9",
)
