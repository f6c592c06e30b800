"""Tests for classification rule loading and matching."""

from __future__ import annotations

from pathlib import Path

import pytest

from archdocs.errors import ConfigError
from archdocs.rules import ClassificationRuleSet, load_rule_set


def _rules(*entries: dict) -> dict:
    return {"rules": list(entries)}


class TestFromYaml:
    """Test loading the YAML mapping file."""

    def test_load_valid_file(self, tmp_path: Path) -> None:
        """Should parse rules in declaration order."""
        mapping = tmp_path / "arch-docs.yaml"
        mapping.write_text(
            "rules:\n"
            "  - name: first\n"
            "    pattern: 'a/(?P<x>.+)'\n"
            "    area: alpha\n"
            "  - name: second\n"
            "    pattern: 'b/.+'\n"
            "    area: beta\n",
            encoding="utf-8",
        )

        rule_set = load_rule_set(mapping)

        assert [rule.name for rule in rule_set] == ["first", "second"]
        assert rule_set.source == str(mapping)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Should raise ConfigError when the file cannot be read."""
        with pytest.raises(ConfigError, match="cannot read mapping file"):
            ClassificationRuleSet.from_yaml(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Should raise ConfigError on invalid YAML."""
        mapping = tmp_path / "bad.yaml"
        mapping.write_text("rules: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError, match="malformed YAML"):
            ClassificationRuleSet.from_yaml(mapping)

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty document is not a valid mapping."""
        mapping = tmp_path / "empty.yaml"
        mapping.write_text("", encoding="utf-8")

        with pytest.raises(ConfigError):
            ClassificationRuleSet.from_yaml(mapping)

    def test_example_mapping_loads(self) -> None:
        """The shipped example mapping should be valid."""
        example = Path(__file__).resolve().parent.parent / "arch-docs.example.yaml"

        rule_set = ClassificationRuleSet.from_yaml(example)

        assert len(rule_set) == 7


class TestValidation:
    """Test rejection of invalid rule definitions."""

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"rules": []}, "no rules"),
            ({}, "'rules' must be a list"),
            ({"rules": "nope"}, "'rules' must be a list"),
            ([1, 2], "must be a YAML mapping"),
            ({"rules": [], "extra": 1}, "unknown top-level keys"),
            (_rules("not a mapping"), "must be a mapping"),
            (_rules({"area": "x"}), "'pattern' is required"),
            (_rules({"pattern": "a/.+"}), "'area' is required"),
            (_rules({"pattern": "a/(", "area": "x"}), "invalid pattern"),
            (_rules({"pattern": "a/.+", "area": "x", "owner": "me"}), "unknown fields"),
            (_rules({"pattern": "a/.+", "area": "{missing}"}), "unknown fields"),
            (_rules({"pattern": "a/.+", "area": "{}"}), "unknown fields"),
            (_rules({"pattern": "(?P<x>.+)", "area": "{x.y}"}), "unknown fields"),
            (_rules({"pattern": "(?P<x>.+)", "area": "{x:>4}"}), "format specs"),
            (_rules({"pattern": "a/.+", "area": "x", "category": 3}), "string or a list"),
            (_rules({"pattern": "a/.+", "area": "x", "extensions": ["pdf"]}), "unsupported extensions"),
            (_rules({"pattern": "a/.+", "area": "x", "description": "{area} {nope}"}), "unknown fields"),
        ],
    )
    def test_invalid_definitions(self, data: object, message: str) -> None:
        """Each invalid definition raises ConfigError with a useful message."""
        with pytest.raises(ConfigError, match=message):
            ClassificationRuleSet.from_dict(data)

    def test_error_mentions_rule_name(self) -> None:
        """Errors should name the offending rule."""
        with pytest.raises(ConfigError, match="rule 'broken'"):
            ClassificationRuleSet.from_dict(_rules({"name": "broken", "pattern": "a/(", "area": "x"}))

    def test_extensions_are_normalized(self) -> None:
        """Extensions accept leading dots and any case."""
        rule_set = ClassificationRuleSet.from_dict(
            _rules({"pattern": ".+", "area": "x", "extensions": [".MDX", "md"]})
        )

        assert rule_set.rules[0].extensions == frozenset({".mdx", ".md"})

    def test_description_may_use_extracted_fields(self) -> None:
        """Description templates can reference area, lang, project and category."""
        ClassificationRuleSet.from_dict(
            _rules({"pattern": ".+", "area": "x", "description": "{category} in {area} {lang} {project}"})
        )


class TestClassify:
    """Test first-match classification."""

    def test_first_match_wins(self) -> None:
        """A path matching several rules takes the earliest rule."""
        rule_set = ClassificationRuleSet.from_dict(
            _rules(
                {"name": "specific", "pattern": r"backend/php/.+", "area": "backend", "category": "php-only"},
                {"name": "general", "pattern": r"backend/.+", "area": "general"},
            )
        )

        result = rule_set.classify("backend/php/api/user.md")

        assert result is not None
        assert result.rule.name == "specific"
        assert result.area == "backend"
        assert result.category == ("php-only",)

    def test_no_match_returns_none(self, rule_set: ClassificationRuleSet) -> None:
        """Unmatched paths are not classified."""
        assert rule_set.classify("misc/unmatched.md") is None

    def test_pattern_must_match_whole_path(self) -> None:
        """Patterns are anchored at both ends."""
        rule_set = ClassificationRuleSet.from_dict(_rules({"pattern": r"docs/[^/]+\.md", "area": "x"}))

        assert rule_set.classify("docs/a.md") is not None
        assert rule_set.classify("prefix/docs/a.md") is None
        assert rule_set.classify("docs/a.md.bak") is None

    def test_captures_fill_templates(self, rule_set: ClassificationRuleSet) -> None:
        """Named captures feed area, lang, category and path."""
        result = rule_set.classify("backend/php/api/user.md")

        assert result is not None
        assert result.area == "backend"
        assert result.lang == "php"
        assert result.category == ("agreements",)
        assert result.project is None
        assert result.path == "php/api/user.md"
        assert result.uri_area == "backend"

    def test_absent_lang_and_project_are_none(self, rule_set: ClassificationRuleSet) -> None:
        """Missing lang/project become None, not empty strings."""
        result = rule_set.classify("notes/readme.md")

        assert result is not None
        assert result.lang is None
        assert result.project is None

    def test_category_defaults_to_area(self, rule_set: ClassificationRuleSet) -> None:
        """Rules without categories tag documents with their area."""
        result = rule_set.classify("notes/readme.md")

        assert result is not None
        assert result.category == ("notes",)

    def test_path_defaults_to_relative_path(self, rule_set: ClassificationRuleSet) -> None:
        """Without a path template the full relative path is used."""
        result = rule_set.classify("notes/readme.md")

        assert result is not None
        assert result.path == "notes/readme.md"

    def test_empty_optional_capture_is_dropped_from_category(self) -> None:
        """Categories rendering to empty strings are removed, duplicates collapsed."""
        rule_set = ClassificationRuleSet.from_dict(
            _rules(
                {
                    "pattern": r"api/(?:(?P<sub>[^/]+)/)?(?P<file>[^/]+)",
                    "area": "openapi",
                    "category": ["openapi", "{sub}", "openapi"],
                }
            )
        )

        plain = rule_set.classify("api/spec.yaml")
        nested = rule_set.classify("api/v1/spec.yaml")

        assert plain is not None and plain.category == ("openapi",)
        assert nested is not None and nested.category == ("openapi", "v1")

    def test_extension_subset_restricts_rule(self) -> None:
        """A rule limited to .mdx lets other files fall through to later rules."""
        rule_set = ClassificationRuleSet.from_dict(
            _rules(
                {"name": "mdx", "pattern": r"arch/.+", "area": "architecture", "extensions": ["mdx"]},
                {"name": "rest", "pattern": r"arch/.+", "area": "other"},
            )
        )

        mdx = rule_set.classify("arch/c1.mdx")
        markdown = rule_set.classify("arch/c1.md")

        assert mdx is not None and mdx.rule.name == "mdx"
        assert markdown is not None and markdown.rule.name == "rest"

    def test_file_fields_available(self) -> None:
        """filename, stem and relpath are available to every template."""
        rule_set = ClassificationRuleSet.from_dict(
            _rules(
                {
                    "pattern": r"adr/(?P<number>\d+)-.+",
                    "area": "architecture",
                    "category": ["adr", "ADR-{number}"],
                    "path": "adr/{filename}",
                    "description": "ADR-{number}: {stem} ({relpath})",
                }
            )
        )

        result = rule_set.classify("adr/007-cache.mdx")

        assert result is not None
        assert result.category == ("adr", "ADR-007")
        assert result.path == "adr/007-cache.mdx"
        assert result.description == "ADR-007: 007-cache (adr/007-cache.mdx)"

    def test_default_description(self, rule_set: ClassificationRuleSet) -> None:
        """The default description summarises category, area, lang and project."""
        agreement = rule_set.classify("backend/php/api/user.md")
        diagram = rule_set.classify("architecture/proj-a/c1.mdx")

        assert agreement is not None
        assert agreement.description == "agreements document in backend (php)"
        assert diagram is not None
        assert diagram.description == "c1 document in architecture for proj-a"
