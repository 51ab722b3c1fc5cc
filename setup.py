from setuptools import setup, find_packages

setup(
    name="zfs-snapshot-operator",
    version="0.1.0",
    packages=find_packages(include=["zfs_snapshot_operator", "zfs_snapshot_operator.*"]),
    install_requires=[
        "python-dotenv>=1.0.0",
        "prometheus-client>=0.17.0",
        "tabulate>=0.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "zfs-snapshot-operator=zfs_snapshot_operator.scripts.operator_cli:main",
        ],
    },
    python_requires=">=3.8",
)
