[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shair"
version = "0.1.0"
description = "Share files with peers on the local network, discovered over mDNS, from a terminal interface"
requires-python = ">=3.10"
keywords = ["file-sharing", "mdns", "lan", "transfer", "tui"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: File Sharing",
    "Topic :: System :: Networking",
]
dependencies = [
    "dnspython>=2.3",
    "humanize>=4.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
shair = "shair.tui.program:main"

[tool.hatch.build.targets.wheel]
packages = ["shair"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
