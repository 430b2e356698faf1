"""
Snapshot codec.

A snapshot is an ordered JSON array of ownership records. This is the only
wire format the engine reads and writes: the verifier consumes two of them,
``testmap map`` produces one. The same module parses the materialized test
list (``[{name, suite, variants}, ...]``) handed over by the acquisition
layer.

Records are written with the warehouse column names (``jira_component``,
``staff_approved_obsolete``, ...). On read, the upstream mapping files'
Go-style keys (``Name``, ``Suite``, ``Component``, ``JIRAComponent``, ...) are
accepted too, so published mappings verify without conversion.

Guardrails:
    ❌ DON'T: Verify against a partially parsed snapshot
    ✅ DO: Treat any unparseable input as a fatal SnapshotError

Examples:
    >>> text = dumps([record])
    >>> loads(text) == [record]
    True

Tags:
    testmap, snapshot, json, pydantic, codec
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from testmap.core.errors import ErrorCategory, ErrorContext, SnapshotError
from testmap.core.logging import get_logger
from testmap.core.models import (
    DEFAULT_JIRA_PROJECT,
    TEST_OWNERSHIP_API_VERSION,
    TEST_OWNERSHIP_KIND,
    TestInfo,
    TestOwnership,
)

logger = get_logger(__name__)


def _alias(*names: str) -> Any:
    return AliasChoices(*names)


class OwnershipRecordSpec(BaseModel):
    """Wire form of a ``TestOwnership`` record."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    api_version: str = Field(
        default=TEST_OWNERSHIP_API_VERSION,
        validation_alias=_alias("apiVersion", "APIVersion", "api_version"),
        serialization_alias="apiVersion",
    )
    kind: str = Field(default=TEST_OWNERSHIP_KIND, validation_alias=_alias("kind", "Kind"))
    id: str | None = Field(default=None, validation_alias=_alias("id", "ID"))
    name: str = Field(..., min_length=1, validation_alias=_alias("name", "Name"))
    suite: str = Field(default="", validation_alias=_alias("suite", "Suite"))
    product: str = Field(default="", validation_alias=_alias("product", "Product"))
    priority: int = Field(default=0, validation_alias=_alias("priority", "Priority"))
    staff_approved_obsolete: bool = Field(
        default=False,
        validation_alias=_alias("staff_approved_obsolete", "StaffApprovedObsolete"),
    )
    component: str = Field(..., min_length=1, validation_alias=_alias("component", "Component"))
    capabilities: list[str] = Field(
        default_factory=list, validation_alias=_alias("capabilities", "Capabilities")
    )
    jira_component: str = Field(
        default="", validation_alias=_alias("jira_component", "JIRAComponent")
    )
    jira_project: str = Field(
        default=DEFAULT_JIRA_PROJECT, validation_alias=_alias("jira_project", "JIRAProject")
    )

    @field_validator("suite", "product", "jira_component", mode="before")
    @classmethod
    def _null_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("capabilities", mode="before")
    @classmethod
    def _null_is_no_capabilities(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_record(self) -> TestOwnership:
        return TestOwnership(
            name=self.name,
            suite=self.suite,
            id=self.id or self.name,
            component=self.component,
            jira_component=self.jira_component,
            jira_project=self.jira_project,
            priority=self.priority,
            capabilities=tuple(self.capabilities),
            product=self.product,
            staff_approved_obsolete=self.staff_approved_obsolete,
            api_version=self.api_version,
            kind=self.kind,
        )

    @classmethod
    def from_record(cls, record: TestOwnership) -> OwnershipRecordSpec:
        return cls(
            api_version=record.api_version,
            kind=record.kind,
            id=record.id,
            name=record.name,
            suite=record.suite,
            product=record.product,
            priority=record.priority,
            staff_approved_obsolete=record.staff_approved_obsolete,
            component=record.component,
            capabilities=list(record.capabilities),
            jira_component=record.jira_component,
            jira_project=record.jira_project,
        )


class TestInfoSpec(BaseModel):
    """Wire form of a ``TestInfo`` produced by the acquisition layer."""

    __test__ = False

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(..., min_length=1, validation_alias=_alias("name", "Name"))
    suite: str = Field(default="", validation_alias=_alias("suite", "Suite", "testsuite"))
    variants: list[str] = Field(default_factory=list, validation_alias=_alias("variants", "Variants"))

    @field_validator("suite", mode="before")
    @classmethod
    def _null_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("variants", mode="before")
    @classmethod
    def _null_is_no_variants(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_test(self) -> TestInfo:
        return TestInfo(name=self.name, suite=self.suite, variants=frozenset(self.variants))


# =============================================================================
# Ownership snapshots
# =============================================================================


def record_to_dict(record: TestOwnership) -> dict[str, Any]:
    """Serializable dict for one record, in column order."""
    return OwnershipRecordSpec.from_record(record).model_dump(by_alias=True)


def dumps(records: Iterable[TestOwnership], indent: int | None = 2) -> str:
    """Serialize records to a JSON array, preserving their order."""
    return json.dumps([record_to_dict(r) for r in records], indent=indent)


def loads(text: str, *, source: str | None = None) -> list[TestOwnership]:
    """Parse a JSON snapshot. Any malformed input raises ``SnapshotError``."""
    return [spec.to_record() for spec in _parse_array(text, OwnershipRecordSpec, source)]


def read_snapshot(path: str | Path) -> list[TestOwnership]:
    """Load a snapshot file."""
    path = Path(path)
    records = loads(_read_text(path), source=str(path))
    logger.info("snapshot.loaded", path=str(path), records=len(records))
    return records


def write_snapshot(records: Iterable[TestOwnership], path: str | Path) -> int:
    """Write records to ``path``. Returns the number written."""
    path = Path(path)
    records = list(records)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(records) + "\n", encoding="utf-8")
    logger.info("snapshot.written", path=str(path), records=len(records))
    return len(records)


# =============================================================================
# Test lists
# =============================================================================


def parse_tests(text: str, *, source: str | None = None) -> list[TestInfo]:
    """Parse a JSON array of ``{name, suite, variants}`` objects."""
    return [spec.to_test() for spec in _parse_array(text, TestInfoSpec, source)]


def read_tests(path: str | Path) -> list[TestInfo]:
    """Load a test list file."""
    path = Path(path)
    tests = parse_tests(_read_text(path), source=str(path))
    logger.info("tests.loaded", path=str(path), tests=len(tests))
    return tests


# =============================================================================
# Helpers
# =============================================================================


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(
            f"Cannot read {path}: {e.strerror or e}",
            category=ErrorCategory.SOURCE,
            context=ErrorContext(path=str(path)),
            cause=e,
        ) from e


def _parse_array(text: str, model: type[BaseModel], source: str | None) -> list[Any]:
    label = source or "<input>"
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError(
            f"Invalid JSON in {label}: {e.msg} (line {e.lineno}, column {e.colno})",
            context=ErrorContext(path=source),
            cause=e,
        ) from e

    if not isinstance(data, list):
        raise SnapshotError(
            f"Expected a JSON array in {label}, got {type(data).__name__}",
            context=ErrorContext(path=source),
        )

    items = []
    for index, item in enumerate(data):
        try:
            items.append(model.model_validate(item))
        except ValidationError as e:
            raise SnapshotError(
                f"Invalid entry #{index} in {label}: {e.errors()[0]['msg']}",
                context=ErrorContext(path=source, metadata={"index": index}),
                cause=e,
            ) from e
    return items
