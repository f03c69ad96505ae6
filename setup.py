from setuptools import setup, find_packages

setup(
    name="mcadre",
    version="0.3",
    description="Context-specific metabolic model building primitives for the COBRApy framework",
    long_description=("Gene-protein-reaction rule parsing, propagation of gene expression evidence to reactions and "
                      "flux consistency checks for the pruning of genome-scale metabolic models (mCADRE)"),
    long_description_content_type="text/plain",
    license="Apache License 2.0",
    python_requires=">=3.8",
    packages=find_packages(include=["mcadre", "mcadre.*"]),
    install_requires=["cobra", "optlang", "numpy", "scipy", "pandas"],
    extras_require={"test": ["pytest", "pytest-timeout"]},
    classifiers=[
        "Intended Audience :: Science/Research", "Development Status :: 3 - Alpha", "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10", "Programming Language :: Python :: 3.11", "Programming Language :: Python :: 3.12",
        "Natural Language :: English", "Operating System :: OS Independent", "Topic :: Scientific/Engineering :: Bio-Informatics"
    ],
    keywords=["metabolism", "constraint-based", "context-specific models", "mCADRE"],
    zip_safe=False,
)
