[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "barblocks"
version = "0.1.0"
description = "Status bar blocks: load average, maildir, network, keyboard layout and colour temperature"
requires-python = ">=3.10"
dependencies = []
keywords = ["status bar", "i3bar", "swaybar", "blocks", "desktop"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: Window Managers :: Applets",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["barblocks"]

[tool.pytest.ini_options]
addopts = "-ra"
