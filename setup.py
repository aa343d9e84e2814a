from setuptools import setup, find_packages

setup(
    name="transform-table",
    version="1.0.0",
    description="Serve JSON Flask routes as HTML tables via a .html suffix",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "flask>=3.0.0",
        "tomli>=2.0.0; python_version<'3.11'",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "hypothesis>=6.92.1",
        ],
    },
)
