[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "celtcore"
version = "0.1.0"
description = "Band energy, stereo, time-frequency and transient analysis building blocks of the CELT audio codec"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "codec", "celt", "mdct", "signal-processing", "dsp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
celt-wrap-lines = "celtcore.wraplines:main"

[tool.hatch.build.targets.wheel]
packages = ["celtcore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
