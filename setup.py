from setuptools import setup, find_packages

setup(
    name="rngrename",
    version="1.0.0",
    description="Rename files to unique, randomly generated names",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "rich>=13.0.0",
        "tomli>=2.0.0; python_version < '3.11'",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "hypothesis>=6.92.1",
        ],
    },
    entry_points={
        "console_scripts": [
            "rngrename=rngrename.cli:main",
        ],
    },
)
