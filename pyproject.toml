[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cardanokit"
version = "0.1.0"
description = "Cardano primitives: bech32, BIP32-Ed25519 keys, addresses, certificates, CIP-30 COSE signing and a message signer command."
requires-python = ">=3.10"
keywords = ["cardano", "bech32", "ed25519", "bip32", "cbor", "cose", "cip30", "blockchain"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "cbor2",
    "pynacl",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
cardano-signer = "cardanokit.signer_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cardanokit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
