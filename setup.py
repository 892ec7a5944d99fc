"""Setup configuration for ado_pr_status"""

from setuptools import setup, find_packages

setup(
    name="ado-pr-status-scanner",
    version="0.1.0",
    description=(
        "CLI tool that classifies Azure DevOps pull requests by review status: "
        "conflicts, failing checks, outstanding comments, ready to merge."
    ),
    author="ADO PR Status Scanner Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "ado-pr-status-scanner=ado_pr_status.main:main",
        ],
    },
)
