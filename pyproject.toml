[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "icstzfix"
version = "0.1.0"
description = "Rewrite Windows and custom time zone identifiers in iCalendar feeds to IANA zone names."
requires-python = ">=3.10"
dependencies = []
keywords = ["icalendar", "ics", "timezone", "tzid", "iana", "outlook", "wsgi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Scheduling",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
icstzfix = "icstzfix.handler:main"

[tool.hatch.build.targets.wheel]
packages = ["icstzfix"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
