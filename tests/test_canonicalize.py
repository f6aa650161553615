import pytest

from backend.core.canonicalize import canonical_json, canonicalize, content_hash, identity_of
from tests.fakes import make_source_workout, make_structure


class TestCanonicalize:
    """Tests for the canonicalize function."""

    def test_canonicalize_sorts_keys_recursively(self):
        """Keys come out in lexicographic order at every depth."""
        result = canonicalize({"b": 1, "a": {"z": 1, "y": [{"d": 1, "c": 2}]}})

        assert list(result) == ["a", "b"]
        assert list(result["a"]) == ["y", "z"]
        assert list(result["a"]["y"][0]) == ["c", "d"]

    def test_canonicalize_keeps_list_order(self):
        assert canonicalize([3, 1, 2]) == [3, 1, 2]

    def test_canonicalize_is_idempotent(self):
        value = make_structure()

        once = canonicalize(value)

        assert canonicalize(once) == once
        assert canonical_json(once) == canonical_json(value)

    def test_scalars_unchanged(self):
        for value in (None, 1, 1.5, "x", True):
            assert canonicalize(value) == value

    def test_canonical_json_is_compact(self):
        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


class TestIdentity:
    """Tests for content_hash / identity_of."""

    def test_key_order_does_not_change_hash(self):
        assert content_hash({"a": 1, "b": 2}) == content_hash({"b": 2, "a": 1})

    def test_different_content_different_hash(self):
        assert content_hash(make_structure(reps=3)) != content_hash(make_structure(reps=4))

    def test_identity_ignores_workout_name(self):
        first = make_source_workout(workout_id=1, title="Monday intervals")
        second = make_source_workout(workout_id=2, title="Renamed copy")

        assert identity_of(first["structure"]) == identity_of(second["structure"])

    def test_identity_format(self):
        identity = identity_of(make_structure())

        tag, digest = identity.split(":")
        assert tag == "TP"
        assert len(digest) == 64

    def test_custom_platform_tag(self):
        assert identity_of(make_structure(), "TR").startswith("TR:")

    @pytest.mark.parametrize("structure", [None, "text", [1, 2]])
    def test_no_identity_without_structure(self, structure):
        assert identity_of(structure) is None
