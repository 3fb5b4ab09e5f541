[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "essfirmware"
version = "0.1.0"
description = "Host-side model of a small serial encryption service: base64url packet framing, XOR and secretbox encryption, a Salsa20 random generator, Morse signalling, MPU register and USB descriptor helpers"
requires-python = ">=3.10"
dependencies = [
    "pynacl",
]
keywords = [
    "base64url",
    "packet",
    "framing",
    "morse",
    "mpu",
    "usb",
    "cdc",
    "salsa20",
    "secretbox",
    "embedded",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
essfirmware = "essfirmware.service:main"

[tool.hatch.build.targets.wheel]
packages = ["essfirmware"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
