"""Project configuration model for reforge.

The configuration is persisted as .reforge.json in the project root:

    {
      "agent": "claude",
      "packages": [{"id": "...", "url": null, "version": "1.0.0"}],
      "metadata": {"created_at": "2025-09-12T00:00:00+00:00", ...}
    }

Validation runs whenever a package is added, when validate() is called
and when a document is loaded, so an invalid configuration is never
written to disk.
"""

import json
import math
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Dict, List, Any
from urllib.parse import urlsplit

from reforge.core.errors import (
    InvalidAgentError,
    InvalidPackageError,
    JsonParseError,
    MissingRequiredFieldError,
    ReforgeError,
    ValidationError,
    with_context,
)

MAX_PACKAGES = 100
MAX_METADATA_ENTRIES = 50
MAX_PACKAGE_ID_LENGTH = 100
MAX_URL_LENGTH = 500
MAX_METADATA_KEY_LENGTH = 100
MAX_METADATA_VALUE_LENGTH = 1000
MAX_PROJECT_NAME_LENGTH = 200

DEFAULT_PACKAGE_VERSION = "1.0.0"

_VERSION_COMPONENT_NAMES = ("major", "minor", "patch")

_RFC3339_RE = re.compile(
    r"^([0-9]{4})-([0-9]{2})-([0-9]{2})[Tt ]([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]+))?"
    r"(?:([Zz])|([+-])([0-9]{2}):([0-9]{2}))$"
)


# =============================================================================
# Helpers
# =============================================================================

def _has_control_chars(text: str) -> bool:
    return any(unicodedata.category(ch) == "Cc" for ch in text)


def _is_json_value(value: Any) -> bool:
    """True if ``value`` serializes to strict JSON (no NaN/Infinity)."""
    if value is None or isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, list):
        return all(_is_json_value(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and _is_json_value(v) for k, v in value.items())
    return False


def _reject_json_constant(name: str) -> Any:
    raise JsonParseError(f"'{name}' is not a valid JSON value")


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp.

    Raises:
        ValueError: If the string is not a complete RFC3339 date-time
            (date, time and offset are all required).
    """
    match = _RFC3339_RE.match(value)
    if not match:
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    if second == 60:
        # leap second
        second = 59
    fraction = match.group(7) or ""
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0
    if match.group(8):
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(match.group(10)), minutes=int(match.group(11)))
        if match.group(9) == "-":
            offset = -offset
        tz = timezone(offset)
    return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=tz)


def utc_now_rfc3339() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Agent
# =============================================================================

class Agent(Enum):
    """Supported AI coding agents."""
    COPILOT = "copilot"
    CLAUDE = "claude"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "Agent":
        """Parse an agent name, ignoring case.

        Raises:
            InvalidAgentError: If the name is not a supported agent
        """
        normalized = value.lower() if isinstance(value, str) else value
        for agent in cls:
            if agent.value == normalized:
                return agent
        raise InvalidAgentError(str(value))

    @classmethod
    def all(cls) -> List["Agent"]:
        return list(cls)

    @classmethod
    def all_names(cls) -> List[str]:
        return [agent.value for agent in cls]

    @property
    def description(self) -> str:
        return _AGENT_DESCRIPTIONS[self]

    @property
    def display_name(self) -> str:
        return _AGENT_DISPLAY_NAMES[self]

    def default_package(self) -> "Package":
        """Template bundle installed by `reforge init` for this agent."""
        return Package(f"reforge-{self.value}-templates", DEFAULT_PACKAGE_VERSION)


_AGENT_DESCRIPTIONS = {
    Agent.COPILOT: "GitHub Copilot - AI pair programmer integrated with your editor",
    Agent.CLAUDE: "Anthropic Claude - Advanced AI assistant for code and conversation",
}

_AGENT_DISPLAY_NAMES = {
    Agent.COPILOT: "GitHub Copilot",
    Agent.CLAUDE: "Claude Code",
}


# =============================================================================
# Package
# =============================================================================

@dataclass
class Package:
    """A deployable bundle of prompt templates."""
    id: str
    version: str
    url: Optional[str] = None

    @classmethod
    def with_url(cls, id: str, url: str, version: str) -> "Package":
        return cls(id=id, version=version, url=url)

    def validate(self) -> None:
        """Check id, version and url, stopping at the first problem.

        Raises:
            InvalidPackageError: Describing the first rule that failed
        """
        if not self.id.strip():
            raise InvalidPackageError("Package ID cannot be empty")

        if any(ch.isspace() for ch in self.id):
            raise InvalidPackageError(
                f"Package ID '{self.id}' cannot contain whitespace characters"
            )

        if len(self.id) > MAX_PACKAGE_ID_LENGTH:
            raise InvalidPackageError(
                f"Package ID '{self.id}' is too long (max {MAX_PACKAGE_ID_LENGTH} characters)"
            )

        if not self.version.strip():
            raise InvalidPackageError("Package version cannot be empty")

        validate_semantic_version(self.version)

        if self.url is not None:
            validate_url(self.url)

    def to_dict(self) -> dict:
        return {"id": self.id, "url": self.url, "version": self.version}

    @classmethod
    def from_dict(cls, data: Any) -> "Package":
        if not isinstance(data, dict):
            raise JsonParseError(f"package entry must be an object, got {type(data).__name__}")
        for key in ("id", "version"):
            if key not in data:
                raise MissingRequiredFieldError(f"packages[].{key}")
            if not isinstance(data[key], str):
                raise JsonParseError(f"package '{key}' must be a string")
        url = data.get("url")
        if url is not None and not isinstance(url, str):
            raise JsonParseError("package 'url' must be a string or null")
        return cls(id=data["id"], version=data["version"], url=url)


def validate_semantic_version(version: str) -> None:
    """Validate ``major.minor.patch[.more][-prerelease][+build]``.

    Every numeric component must be ASCII digits without leading zeros.
    More than three components are accepted.
    """
    trimmed = version.strip()

    if not trimmed[:1].isdigit() or not trimmed[:1].isascii():
        raise InvalidPackageError(
            f"Version '{version}' must start with a number (e.g., '1.0.0')"
        )

    main_part, plus, build = trimmed.partition("+")
    if plus and not build:
        raise InvalidPackageError(f"Version '{version}' has empty build metadata")

    core, dash, pre_release = main_part.partition("-")
    if dash and not pre_release:
        raise InvalidPackageError(f"Version '{version}' has empty pre-release identifier")

    parts = core.split(".")
    if len(parts) < 3:
        raise InvalidPackageError(
            f"Version '{version}' should have at least major.minor.patch format (e.g., '1.0.0')"
        )

    for i, part in enumerate(parts):
        if not part:
            raise InvalidPackageError(
                f"Version '{version}' has empty version component at position {i}"
            )
        if not (part.isascii() and part.isdigit()):
            component = _VERSION_COMPONENT_NAMES[i] if i < 3 else "version component"
            raise InvalidPackageError(
                f"Version '{version}' has invalid {component} component '{part}' (must be numeric)"
            )
        if len(part) > 1 and part.startswith("0"):
            raise InvalidPackageError(
                f"Version '{version}' component '{part}' cannot have leading zeros"
            )


def validate_url(url: str) -> None:
    """Validate an http(s) package URL."""
    trimmed = url.strip()

    if not trimmed:
        raise InvalidPackageError("Package URL cannot be empty when specified")

    if not trimmed.startswith(("http://", "https://")):
        raise InvalidPackageError(
            f"Package URL '{url}' must start with 'http://' or 'https://'"
        )

    try:
        host = urlsplit(trimmed).hostname
    except ValueError:
        host = None
    if not host:
        raise InvalidPackageError(f"Package URL '{url}' is missing domain name")

    if len(trimmed) > MAX_URL_LENGTH:
        raise InvalidPackageError(
            f"Package URL is too long (max {MAX_URL_LENGTH} characters): '{url}'"
        )


# =============================================================================
# ProjectConfig
# =============================================================================

def _default_metadata() -> Dict[str, Any]:
    return {"created_at": utc_now_rfc3339()}


@dataclass
class ProjectConfig:
    """Contents of .reforge.json."""
    agent: Agent
    packages: List[Package] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=_default_metadata)

    @classmethod
    def new(cls, agent: Agent) -> "ProjectConfig":
        return cls(agent=agent)

    @classmethod
    def with_project_name(cls, agent: Agent, project_name: str) -> "ProjectConfig":
        config = cls(agent=agent)
        config.metadata["project_name"] = project_name
        return config

    # -------------------------------------------------------------------------
    # Packages
    # -------------------------------------------------------------------------

    def add_package(self, package: Package) -> None:
        """Validate and append a package.

        Raises:
            InvalidPackageError: If the package is invalid or its id is taken
        """
        package.validate()
        if self.get_package(package.id) is not None:
            raise InvalidPackageError(f"Package with ID '{package.id}' already exists")
        self.packages.append(package)

    def get_package(self, package_id: str) -> Optional[Package]:
        for package in self.packages:
            if package.id == package_id:
                return package
        return None

    def remove_package(self, package_id: str) -> Optional[Package]:
        for i, package in enumerate(self.packages):
            if package.id == package_id:
                return self.packages.pop(i)
        return None

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def set_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def get_metadata(self, key: str) -> Any:
        return self.metadata.get(key)

    @property
    def created_at(self) -> Optional[str]:
        value = self.metadata.get("created_at")
        return value if isinstance(value, str) else None

    @property
    def project_name(self) -> Optional[str]:
        value = self.metadata.get("project_name")
        return value if isinstance(value, str) else None

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> None:
        """Validate the whole configuration.

        Raises:
            ReforgeError: For the first rule that is violated
        """
        if not isinstance(self.agent, Agent):
            raise InvalidAgentError(str(self.agent))

        for index, package in enumerate(self.packages):
            try:
                package.validate()
            except InvalidPackageError as e:
                raise InvalidPackageError(f"Package at index {index}: {e.reason}") from e

        self._validate_unique_package_ids()

        if len(self.packages) > MAX_PACKAGES:
            raise ValidationError(f"Too many packages (max {MAX_PACKAGES} allowed)")

        self._validate_required_metadata()
        self._validate_metadata_values()

    def validate_with_context(self, context: str) -> None:
        """Validate, wrapping any failure with the caller's context."""
        try:
            self.validate()
        except ReforgeError as e:
            raise with_context(e, "validate configuration", f"in {context}") from e

    def _validate_unique_package_ids(self) -> None:
        seen = set()
        for package in self.packages:
            if package.id in seen:
                raise InvalidPackageError(
                    f"Duplicate package ID: '{package.id}'. "
                    "Each package must have a unique identifier"
                )
            seen.add(package.id)

    def _validate_required_metadata(self) -> None:
        if "created_at" not in self.metadata:
            raise MissingRequiredFieldError("created_at")

        created_at = self.metadata["created_at"]
        if not isinstance(created_at, str):
            raise ValidationError("created_at must be a string in ISO 8601 format")
        try:
            parse_rfc3339(created_at)
        except ValueError:
            raise ValidationError(
                f"Invalid created_at timestamp format: '{created_at}'. "
                "Expected ISO 8601/RFC3339 format"
            ) from None

    def _validate_metadata_values(self) -> None:
        if len(self.metadata) > MAX_METADATA_ENTRIES:
            raise ValidationError(
                f"Too many metadata fields (max {MAX_METADATA_ENTRIES} allowed)"
            )

        for key, value in self.metadata.items():
            if not isinstance(key, str):
                raise ValidationError(f"Metadata key {key!r} must be a string")

            if not key.strip():
                raise ValidationError("Metadata keys cannot be empty")

            if len(key) > MAX_METADATA_KEY_LENGTH:
                raise ValidationError(
                    f"Metadata key '{key}' is too long (max {MAX_METADATA_KEY_LENGTH} characters)"
                )

            if _has_control_chars(key):
                raise ValidationError(
                    f"Metadata key {key!r} contains invalid control characters"
                )

            if key == "project_name":
                if not isinstance(value, str):
                    raise ValidationError("project_name must be a string")
                validate_project_name(value)

            if not _is_json_value(value):
                raise ValidationError(
                    f"Metadata value for key '{key}' is not a JSON value "
                    f"({type(value).__name__})"
                )

            if isinstance(value, str) and len(value) > MAX_METADATA_VALUE_LENGTH:
                raise ValidationError(
                    f"Metadata value for key '{key}' is too long "
                    f"(max {MAX_METADATA_VALUE_LENGTH} characters)"
                )

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "agent": self.agent.value,
            "packages": [p.to_dict() for p in self.packages],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ProjectConfig":
        """Build a config from parsed JSON without validating it."""
        if not isinstance(data, dict):
            raise JsonParseError(
                f"configuration must be a JSON object, got {type(data).__name__}"
            )
        for key in ("agent", "packages", "metadata"):
            if key not in data:
                raise MissingRequiredFieldError(key)

        agent_value = data["agent"]
        if not isinstance(agent_value, str):
            raise JsonParseError("'agent' must be a string")
        try:
            agent = Agent(agent_value)
        except ValueError:
            raise InvalidAgentError(agent_value) from None

        if not isinstance(data["packages"], list):
            raise JsonParseError("'packages' must be an array")
        if not isinstance(data["metadata"], dict):
            raise JsonParseError("'metadata' must be an object")

        return cls(
            agent=agent,
            packages=[Package.from_dict(p) for p in data["packages"]],
            metadata=dict(data["metadata"]),
        )

    def to_json_string(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False, allow_nan=False)

    @classmethod
    def from_json_string(cls, text: str) -> "ProjectConfig":
        """Parse and validate a configuration document."""
        try:
            data = json.loads(text, parse_constant=_reject_json_constant)
        except json.JSONDecodeError as e:
            raise JsonParseError(str(e)) from e
        config = cls.from_dict(data)
        config.validate()
        return config


def validate_project_name(name: str) -> None:
    trimmed = name.strip()

    if not trimmed:
        raise ValidationError("project_name cannot be empty")

    if len(trimmed) > MAX_PROJECT_NAME_LENGTH:
        raise ValidationError(
            f"project_name is too long (max {MAX_PROJECT_NAME_LENGTH} characters)"
        )

    if _has_control_chars(trimmed):
        raise ValidationError("project_name cannot contain control characters")
