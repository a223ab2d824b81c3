[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pipeline_doctor"
version = "0.1.0"
description = "Webhook service that diagnoses failing CI jobs from GitHub and GitLab and plans corrective actions"
requires-python = ">=3.10"
keywords = ["ci", "cd", "github", "gitlab", "webhook", "flaky-tests", "pipeline"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "starlette",
    "uvicorn",
    "httpx",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "respx",
    "httpx",
]

[project.scripts]
pipeline-doctor = "pipeline_doctor.app:main"

[tool.hatch.build.targets.wheel]
packages = ["pipeline_doctor"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
