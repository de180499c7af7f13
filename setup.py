from setuptools import setup, find_packages

setup(
    name="airlift",
    version="0.1.0",
    description="Export container images to archives and import them into offline registries",
    author="",
    package_dir={"": "src"},
    packages=find_packages(where="src", exclude=["*.tests", "*.tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "pyyaml>=6.0.1",
        "click>=8.1.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "airlift=airlift.cli:main",
        ],
    },
    include_package_data=True,
)
