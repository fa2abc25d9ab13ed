[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sshproto"
version = "0.1.0"
description = "SSH protocol building blocks: algorithm negotiation, key exchange, key derivation, MACs and channel-open parsing"
requires-python = ">=3.10"
dependencies = []
keywords = ["ssh", "protocol", "key-exchange", "diffie-hellman", "curve25519", "hmac", "kexinit"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Internet",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sshproto"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
