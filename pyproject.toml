[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cudals"
version = "0.0.1"
description = "A minimal language server for CUDA sources speaking LSP over stdio"
requires-python = ">=3.10"
dependencies = []
keywords = ["cuda", "lsp", "language-server", "json-rpc", "editor"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Editors :: Integrated Development Environments (IDE)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cudals = "cudals.server:main"

[tool.hatch.build.targets.wheel]
packages = ["cudals"]

[tool.pytest.ini_options]
addopts = "-ra"
