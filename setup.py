import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="fhir_schema_to_code",
    version="0.1.0",
    description="Resolve FHIR schema definitions into stable, collision-free type systems for code generators",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
        "Intended Audience :: Developers",
    ],
    keywords="fhir schema code generation naming enumeration backbone",
    author="François Lagunas",
    author_email="francois.lagunas@gmail.com",
    license="MIT",
    packages=find_packages(),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "jinja2>=3.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "fhir_schema_to_code=fhir_schema_to_code.fhir_schema_to_code:fhir_schema_to_code",
        ],
    },
    include_package_data=True,
    package_data={
        "fhir_schema_to_code": ["templates/**/*.jinja2", "templates/*/*.jinja2", "tests/test_data/*.json"],
    },
    zip_safe=False,
)
