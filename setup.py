from setuptools import setup, find_packages

# -------------------------------------------------
# Setup (metadata comes from pyproject.toml)
# -------------------------------------------------

setup(
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"repeat_hmm.config": ["*.yaml"]},
    include_package_data=True,
    zip_safe=False,
)
