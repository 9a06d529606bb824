from setuptools import find_packages, setup

setup(
    name="fastq-composition",
    version="0.1.0",
    description="Per-position base composition of sampled FASTQ reads",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "numpy",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "fastq-composition=fastq_composition.__main__:main",
        ],
    },
    zip_safe=False,
)
