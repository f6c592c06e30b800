"""Classification rules loaded from the YAML mapping file.

A mapping file holds an ordered list of rules. Each rule matches the POSIX
path of a file relative to the docs root with a regular expression and turns
its named captures into document metadata through ``str.format`` templates::

    rules:
      - name: adr
        pattern: 'content/docs/architecture/(?P<project>[^/]+)/adr/(?P<file>[^/]+)'
        area: architecture
        category: [adr]
        project: '{project}'
        path: '{project}/adr/{file}'
        extensions: [mdx]

Rules are evaluated in declaration order and the first match wins.
"""

from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterator, Mapping, Sequence

import yaml

from archdocs.errors import ConfigError
from archdocs.models import SUPPORTED_EXTENSIONS
from archdocs.utils.text import describe, unique_in_order

LOGGER = logging.getLogger(__name__)

RULE_KEYS = frozenset(
    {"name", "pattern", "area", "lang", "category", "project", "path", "uri_area", "extensions", "description"}
)
TOP_LEVEL_KEYS = frozenset({"rules"})
FILE_FIELDS = frozenset({"filename", "stem", "relpath"})
DESCRIPTION_FIELDS = frozenset({"area", "lang", "project", "category"})

_FORMATTER = string.Formatter()


@dataclass(frozen=True, slots=True)
class Template:
    """A ``str.format`` template restricted to named fields."""

    source: str

    def render(self, values: Mapping[str, str]) -> str:
        return self.source.format_map(values).strip()


@dataclass(frozen=True, slots=True)
class Classification:
    """Fields extracted from a path by the first matching rule."""

    rule: "ClassificationRule"
    area: str
    uri_area: str
    path: str
    lang: str | None
    category: tuple[str, ...]
    project: str | None
    description: str


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    name: str
    pattern: re.Pattern[str]
    area: Template
    category: tuple[Template, ...] = ()
    lang: Template | None = None
    project: Template | None = None
    path: Template | None = None
    uri_area: Template | None = None
    extensions: frozenset[str] | None = None
    description: Template | None = None

    def apply(self, relpath: str) -> Classification | None:
        """Classify relpath, or return None when this rule does not match."""
        if self.extensions is not None and PurePosixPath(relpath).suffix.lower() not in self.extensions:
            return None
        match = self.pattern.fullmatch(relpath)
        if match is None:
            return None

        name = PurePosixPath(relpath).name
        values: Dict[str, str] = {"filename": name, "stem": PurePosixPath(name).stem, "relpath": relpath}
        values.update({key: value or "" for key, value in match.groupdict().items()})

        area = self.area.render(values)
        lang = self.lang.render(values) if self.lang else ""
        project = self.project.render(values) if self.project else ""
        category = unique_in_order(template.render(values) for template in self.category) or (area,)
        path = self.path.render(values) if self.path else relpath
        uri_area = self.uri_area.render(values) if self.uri_area else area

        if self.description is not None:
            description = self.description.render(
                {**values, "area": area, "lang": lang, "project": project, "category": ", ".join(category)}
            )
        else:
            description = describe(area, lang or None, category, project or None)

        return Classification(
            rule=self,
            area=area,
            uri_area=uri_area,
            path=path,
            lang=lang or None,
            category=category,
            project=project or None,
            description=description,
        )


class ClassificationRuleSet:
    """Ordered, validated collection of classification rules."""

    def __init__(self, rules: Sequence[ClassificationRule], *, source: str = "<memory>") -> None:
        if not rules:
            raise ConfigError("mapping defines no rules", source=source)
        self._rules = tuple(rules)
        self.source = source

    def __iter__(self) -> Iterator[ClassificationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return self._rules

    def classify(self, relpath: str) -> Classification | None:
        """Classify relpath with the first rule that matches it."""
        for rule in self._rules:
            result = rule.apply(relpath)
            if result is not None:
                return result
        return None

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ClassificationRuleSet":
        """Load a rule set from a YAML mapping file.

        Raises:
            ConfigError: if the file is unreadable, malformed or invalid.
        """
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except OSError as exc:
            raise ConfigError(f"cannot read mapping file: {exc}", source=path) from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"malformed YAML: {exc}", source=path) from exc

        rule_set = cls.from_dict(data, source=str(path))
        LOGGER.info("Loaded %d classification rules from %s", len(rule_set), path)
        return rule_set

    @classmethod
    def from_dict(cls, data: Any, *, source: str = "<memory>") -> "ClassificationRuleSet":
        if not isinstance(data, dict):
            raise ConfigError("mapping must be a YAML mapping with a 'rules' list", source=source)
        unknown = set(data) - TOP_LEVEL_KEYS
        if unknown:
            raise ConfigError(f"unknown top-level keys: {', '.join(sorted(map(str, unknown)))}", source=source)
        entries = data.get("rules")
        if not isinstance(entries, list):
            raise ConfigError("'rules' must be a list", source=source)
        if not entries:
            raise ConfigError("mapping defines no rules", source=source)

        rules = [_parse_rule(entry, index, source) for index, entry in enumerate(entries, start=1)]
        return cls(rules, source=source)


def load_rule_set(path: Path | str) -> ClassificationRuleSet:
    return ClassificationRuleSet.from_yaml(path)


def _parse_rule(entry: Any, index: int, source: str) -> ClassificationRule:
    label = f"rule #{index}"
    if not isinstance(entry, dict):
        raise ConfigError(f"{label} must be a mapping", source=source)

    unknown = set(entry) - RULE_KEYS
    if unknown:
        raise ConfigError(f"{label} has unknown fields: {', '.join(sorted(map(str, unknown)))}", source=source)

    name = entry.get("name", label)
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f"{label}: 'name' must be a non-empty string", source=source)
    label = f"rule '{name}'" if "name" in entry else label

    for required in ("pattern", "area"):
        if not isinstance(entry.get(required), str) or not entry[required].strip():
            raise ConfigError(f"{label}: '{required}' is required and must be a string", source=source)

    try:
        pattern = re.compile(entry["pattern"])
    except re.error as exc:
        raise ConfigError(f"{label}: invalid pattern {entry['pattern']!r}: {exc}", source=source) from exc

    fields = FILE_FIELDS | frozenset(pattern.groupindex)

    def template(key: str, allowed: frozenset[str] = fields) -> Template | None:
        if key not in entry or entry[key] is None:
            return None
        return _parse_template(entry[key], allowed, f"{label}: '{key}'", source)

    categories = tuple(
        _parse_template(value, fields, f"{label}: 'category'", source)
        for value in _string_list(entry.get("category"), f"{label}: 'category'", source)
    )

    extensions = None
    if entry.get("extensions") is not None:
        extensions = frozenset(
            "." + ext.strip().lstrip(".").lower()
            for ext in _string_list(entry["extensions"], f"{label}: 'extensions'", source)
        )
        unsupported = extensions - SUPPORTED_EXTENSIONS
        if not extensions or unsupported:
            raise ConfigError(
                f"{label}: unsupported extensions {sorted(unsupported)}; "
                f"supported: {sorted(SUPPORTED_EXTENSIONS)}",
                source=source,
            )

    return ClassificationRule(
        name=name,
        pattern=pattern,
        area=template("area"),  # type: ignore[arg-type]
        category=categories,
        lang=template("lang"),
        project=template("project"),
        path=template("path"),
        uri_area=template("uri_area"),
        extensions=extensions,
        description=template("description", fields | DESCRIPTION_FIELDS),
    )


def _parse_template(value: Any, allowed: frozenset[str], label: str, source: str) -> Template:
    if not isinstance(value, str):
        raise ConfigError(f"{label} must be a string", source=source)
    try:
        parsed = [item for item in _FORMATTER.parse(value) if item[1] is not None]
    except ValueError as exc:
        raise ConfigError(f"{label}: malformed template {value!r}: {exc}", source=source) from exc
    if any(spec or conversion for _, _, spec, conversion in parsed):
        raise ConfigError(f"{label}: format specs and conversions are not supported in {value!r}", source=source)
    names = {field for _, field, _, _ in parsed}
    unknown = names - allowed
    if unknown:
        raise ConfigError(
            f"{label} references unknown fields {sorted(unknown)}; available: {sorted(allowed)}",
            source=source,
        )
    return Template(source=value)


def _string_list(value: Any, label: str, source: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    raise ConfigError(f"{label} must be a string or a list of strings", source=source)
