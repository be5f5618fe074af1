from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="gasnet",
    version="0.1.0",
    description="Gas pipeline network modeling: paths, maximum flow and station ordering.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=["networkx>=3.4", "PyYAML>=6.0"],
    extras_require={"test": ["pytest>=7.0"]},
    entry_points={"console_scripts": ["gasnet=gasnet.cli:main"]},
)
