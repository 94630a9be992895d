from setuptools import setup, find_namespace_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="vpn-router",
    version="1.0.0",
    author="VPN Router Team",
    author_email="vpnrouter@example.com",
    description="Host routing and DNS configuration manager for a VPN client",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["router", "router.*", "common", "common.*"]),
    py_modules=["main"],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: Microsoft :: Windows",
    ],
    python_requires=">=3.8",
    install_requires=[
        "pyroute2>=0.7.3,<0.8;platform_system=='Linux'",
        "jeepney>=0.7.1;platform_system=='Linux'",
        "pywin32>=300;platform_system=='Windows'",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'vpn-router=main:main',
        ],
    },
    include_package_data=True,
)
