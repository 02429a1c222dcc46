from setuptools import setup, find_packages

setup(
    name="sss_data",
    version="1.0.0",
    description=(
        "Inflation-adjusted comparisons of Self-Sufficiency Standard "
        "cost tables across publication years."
    ),
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(),
    include_package_data=True,  # Will read MANIFEST.in
    python_requires=">=3.9",
    install_requires=[
        "pandas",
        "numpy",
        "openpyxl",
        "pyyaml",
        "tabulate",
        "tqdm",
    ],
    extras_require={
        "dev": [
            "black",
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "sss-report=sss_data.pipeline:main",
        ],
    },
)
