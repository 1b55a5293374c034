"""Tests for trellis.domain.objects.identifiers."""

import pytest

from trellis.domain.objects import (
    ObjectType,
    extract_object_id,
    extract_object_ids,
    generate_unique_id,
    infer_object_type,
    is_object_id,
    slugify,
)
from trellis.domain.objects.identifiers import truncate_slug


class TestExtractObjectId:
    """Test extract_object_id function."""

    def test_nested_task_path(self):
        assert extract_object_id("p/P-app/e/E-api/f/F-auth/t/open/T-login.md") == "T-login"

    def test_project_path(self):
        assert extract_object_id("p/P-app/P-app.md") == "P-app"

    def test_backslash_separators(self):
        assert extract_object_id(r"t\closed\T-fix-typo.md") == "T-fix-typo"

    def test_bare_id_without_suffix(self):
        assert extract_object_id("F-auth") == "F-auth"

    @pytest.mark.parametrize(
        "location",
        ["README.md", "p/P-app/notes.md", "t/open/X-thing.md", "", "p/t-lowercase.md"],
    )
    def test_non_conforming_names_return_none(self, location):
        assert extract_object_id(location) is None

    def test_depth_does_not_matter(self):
        shallow = extract_object_id("T-a.md")
        deep = extract_object_id("a/b/c/d/e/f/g/T-a.md")
        assert shallow == deep == "T-a"


class TestExtractObjectIds:
    """Test extract_object_ids function."""

    def test_drops_non_objects_and_sorts(self):
        ids = extract_object_ids(["t/open/T-b.md", "notes.md", "t/closed/T-a.md"])
        assert ids == ["T-a", "T-b"]

    def test_deduplicates(self):
        assert extract_object_ids(["T-a.md", "x/T-a.md"]) == ["T-a"]

    def test_order_independent(self):
        locations = ["F-x.md", "T-y.md", "E-z.md"]
        assert extract_object_ids(locations) == extract_object_ids(reversed(locations))


class TestInferObjectType:
    """Test infer_object_type and is_object_id."""

    @pytest.mark.parametrize(
        ("object_id", "expected"),
        [
            ("P-app", ObjectType.PROJECT),
            ("E-api", ObjectType.EPIC),
            ("F-auth", ObjectType.FEATURE),
            ("T-login", ObjectType.TASK),
        ],
    )
    def test_prefixes(self, object_id, expected):
        assert infer_object_type(object_id) == expected

    def test_empty_id_raises(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            infer_object_type("")

    def test_unknown_prefix_raises(self):
        with pytest.raises(ValueError, match="must start with P, E, F, or T"):
            infer_object_type("X-thing")

    def test_is_object_id(self):
        assert is_object_id("T-login")
        assert not is_object_id("login")


class TestGenerateUniqueId:
    """Test slug and id generation."""

    def test_slugify(self):
        assert slugify("Add User Authentication!") == "add-user-authentication"
        assert slugify("  snake_case   and--dashes ") == "snake-case-and-dashes"

    def test_truncate_cuts_at_late_hyphen(self):
        slug = "implement-the-authentication-flow-for-users"
        truncated = truncate_slug(slug)
        assert len(truncated) <= 30
        assert not truncated.endswith("-")
        assert slug.startswith(truncated)

    def test_prefix_from_type(self):
        assert generate_unique_id("Write docs", ObjectType.TASK, []) == "T-write-docs"
        assert generate_unique_id("Write docs", ObjectType.EPIC, []) == "E-write-docs"

    def test_collision_suffix(self):
        existing = ["T-write-docs", "T-write-docs-1"]
        assert generate_unique_id("Write docs", ObjectType.TASK, existing) == "T-write-docs-2"

    def test_blank_title_raises(self):
        with pytest.raises(ValueError):
            generate_unique_id("   ", ObjectType.TASK, [])

    def test_punctuation_only_title_raises(self):
        with pytest.raises(ValueError, match="alphanumeric"):
            generate_unique_id("!!!", ObjectType.TASK, [])
