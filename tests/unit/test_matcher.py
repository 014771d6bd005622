"""Unit tests for itembind.matching — selecting a structural root per record."""
from __future__ import annotations

import pytest

from itembind.analysis.structure import StructuralNode, analyze
from itembind.dom.html import parse_fragment
from itembind.matching.matcher import TypeMatcher, select_root

PERSON = "https://schema.org/Person"
TASK = "https://schema.org/Task"


def _root(html: str) -> StructuralNode:
    return analyze(parse_fragment(html))


@pytest.fixture()
def matcher() -> TypeMatcher:
    return TypeMatcher()


@pytest.fixture()
def typed_roots() -> list[StructuralNode]:
    return [
        _root(f'<article itemscope itemtype="{PERSON}"></article>'),
        _root(f'<section itemscope itemtype="{TASK}"></section>'),
    ]


class TestQualifiedType:
    def test_joins_context_and_type(self, matcher: TypeMatcher) -> None:
        assert matcher.qualified_type({"@type": "Person", "@context": "https://schema.org"}) == PERSON

    def test_trailing_separator_is_not_doubled(self, matcher: TypeMatcher) -> None:
        assert matcher.qualified_type({"@type": "Person", "@context": "https://schema.org/"}) == PERSON

    @pytest.mark.parametrize("record", [
        {"@type": "Person"},
        {"@context": "https://schema.org"},
        {"@type": "", "@context": "x"},
        {},
        "not a record",
    ])
    def test_incomplete_type_is_none(self, matcher: TypeMatcher, record: object) -> None:
        assert matcher.qualified_type(record) is None


class TestSelectRoot:
    def test_exact_type_match(self, matcher: TypeMatcher, typed_roots: list[StructuralNode]) -> None:
        record = {"@type": "Task", "@context": "https://schema.org"}
        assert matcher.select_root(record, typed_roots) is typed_roots[1]

    def test_first_match_wins(self, matcher: TypeMatcher) -> None:
        roots = [
            _root(f'<p itemtype="{PERSON}"></p>'),
            _root(f'<div itemtype="{PERSON}"></div>'),
        ]
        assert matcher.select_root({"@type": "Person", "@context": "https://schema.org"}, roots) is roots[0]

    def test_unmatched_typed_record(self, matcher: TypeMatcher, typed_roots: list[StructuralNode]) -> None:
        record = {"@type": "Event", "@context": "https://schema.org"}
        assert matcher.select_root(record, typed_roots) is None

    def test_type_without_context_takes_untyped_root(self, matcher: TypeMatcher) -> None:
        roots = [_root(f'<p itemtype="{PERSON}"></p>'), _root("<div></div>")]
        assert matcher.select_root({"@type": "Person"}, roots) is roots[1]

    def test_type_without_context_unmatched_when_all_typed(
        self, matcher: TypeMatcher, typed_roots: list[StructuralNode]
    ) -> None:
        assert matcher.select_root({"@type": "Person"}, typed_roots) is None

    def test_untyped_roots_apply_to_any_record(self, matcher: TypeMatcher) -> None:
        roots = [_root("<p></p>"), _root("<div></div>")]
        record = {"@type": "Anything", "@context": "https://example.com"}
        assert matcher.select_root(record, roots) is roots[0]
        assert matcher.select_root({}, roots) is roots[0]

    def test_no_candidates(self, matcher: TypeMatcher) -> None:
        assert matcher.select_root({}, []) is None

    def test_custom_separator(self) -> None:
        roots = [_root('<p itemtype="urn:v#Thing"></p>')]
        record = {"@type": "Thing", "@context": "urn:v"}
        assert TypeMatcher(separator="#").select_root(record, roots) is roots[0]

    def test_module_level_select_root(self, typed_roots: list[StructuralNode]) -> None:
        assert select_root({"@type": "Person", "@context": "https://schema.org"}, typed_roots) is typed_roots[0]
