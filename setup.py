from setuptools import setup

setup(
    name="site-drift-monitor",
    version="0.1.0",
    description="Supply-chain drift monitoring for the hosts a web site loads code from",
    package_dir={"": "src"},
    py_modules=[
        "ast_analyzer",
        "baseline",
        "config",
        "github_issues",
        "handlers",
        "host_patterns",
        "issue_lifecycle",
        "logger",
        "monitor",
        "network_capture",
        "obfuscation",
        "observations",
        "utils",
    ],
    install_requires=[
        "requests>=2.31.0",
        "colorama>=0.4.6",
        "python-dotenv>=1.0.0",
        "esprima>=4.0.1",
        "playwright>=1.40.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "drift-monitor=monitor:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Security",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
    ],
)
