[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "euicc"
version = "1.0.0"
description = "BER-TLV encoding, APDU transport and modem channels (AT, MBIM, QMI, QRTR) for talking to eUICC chips"
requires-python = ">=3.10"
dependencies = []
keywords = ["euicc", "esim", "apdu", "ber-tlv", "mbim", "qmi", "qrtr", "at+csim", "smart card"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Telephony",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["euicc"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
