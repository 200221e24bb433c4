# setup.py
from setuptools import setup, find_packages

setup(
    name="data-contract-creator",     # the *distribution* name on PyPI
    version="1.0.0",
    packages=find_packages(include=["contract_creator", "contract_creator.*"]),
    python_requires=">=3.9",
    install_requires=[
        "jsonschema>=4.0",            # protocol meta-schema checks
        "pandas",                     # tabular contract overview
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,        # so we can bundle the JSON meta-schemas
    package_data={
        "contract_creator": ["schemas/*.json"],
    },
    description="Compile, import and validate document-type data contracts",
    author="Your Name",
    license="Creative Commons Attribution-NonCommercial-ShareAlike 4.0 International License",
)
