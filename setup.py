from setuptools import setup, find_packages

setup(
    name="lb-sim",
    version="0.1.0",
    description="Client-side load balancer policy simulator over non-stationary backends",
    packages=find_packages(include=["lbsim", "lbsim.*"]),
    install_requires=[
        "matplotlib",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["lbsim=lbsim.__main__:main"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
