from setuptools import setup, find_packages

setup(
    name="ibd_genus_tools",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        # Core data processing
        "pandas>=1.3.0",
        "numpy>=1.20.0",
        "scipy>=1.7.0",

        # Statistical and scientific libraries
        "scikit-posthocs>=0.7.0",
        "statsmodels>=0.13.0",

        # Visualization
        "matplotlib>=3.4.0",
        "seaborn>=0.11.2",
        "adjustText>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'ibd-genus-tools=ibd_genus_tools.cli.main_cli:main',
        ],
    },
    description="Genus-level differential abundance analysis of IBD (UC, CD) versus nonIBD microbiome samples",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Intended Audience :: Science/Research",
    ],
    python_requires=">=3.8",
)
