[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rpcproxy"
version = "0.1.0"
description = "JSON-RPC proxy core: weighted provider selection, cached project registry lookups and in-process metrics"
requires-python = ">=3.10"
keywords = ["json-rpc", "proxy", "blockchain", "rpc", "load-balancing", "redis"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Internet :: Proxy Servers",
]
dependencies = [
    "httpx",
    "msgpack",
    "redis",
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "respx",
]

[tool.hatch.build.targets.wheel]
packages = ["rpcproxy"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
