[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "workspace-mcp"
version = "0.5.0"
description = "OAuth 2.1 authorization-server building blocks and Gmail message composition for a multi-tenant workspace MCP server"
requires-python = ">=3.10"
keywords = ["mcp", "oauth", "pkce", "jwt", "gmail", "mime", "aes-gcm", "sqlite"]
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
    "Topic :: Security",
    "Topic :: Communications :: Email",
    "Topic :: Internet :: WWW/HTTP",
]
dependencies = [
    "cryptography>=41",
    "pyjwt>=2.8",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[tool.hatch.build.targets.wheel]
packages = ["workspace_mcp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
