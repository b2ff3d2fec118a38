import threading

from domain.schemas import TaxonomyKind
from domain.taxonomy import (
    TaxonomyAccumulator,
    category_names,
    dedupe_by_slug,
    extract_taxonomy_names,
    tag_names,
)


def test_delimited_string_is_split_and_trimmed() -> None:
    assert extract_taxonomy_names("Web, Python;  Data ,") == ["Web", "Python", "Data"]


def test_list_value_and_case_folding() -> None:
    assert extract_taxonomy_names(["React", "react", " REACT ", "Vue"]) == ["React", "Vue"]


def test_unusable_values_yield_nothing() -> None:
    assert extract_taxonomy_names(None) == []
    assert extract_taxonomy_names(True) == []
    assert extract_taxonomy_names(42) == []
    assert extract_taxonomy_names(" , ; ") == []


def test_plural_key_wins_when_non_empty() -> None:
    assert category_names({"categories": ["A"], "category": "B"}) == ["A"]
    assert category_names({"categories": [], "category": "B"}) == ["B"]
    assert tag_names({"tag": "solo"}) == ["solo"]
    assert tag_names({}) == []


def test_dedupe_drops_names_without_slug() -> None:
    assert dedupe_by_slug(["!!!", "C++", "c"]) == ["C++"]


def test_accumulator_keeps_first_spelling_per_slug() -> None:
    acc = TaxonomyAccumulator()
    acc.add(TaxonomyKind.CATEGORY, ["React", "Web Dev"])
    acc.add(TaxonomyKind.CATEGORY, ["react", "web-dev", "Python"])
    acc.add(TaxonomyKind.TAG, ["react"])

    assert acc.categories == ["React", "Web Dev", "Python"]
    assert acc.items(TaxonomyKind.CATEGORY)[0] == ("react", "React")
    assert acc.tags == ["react"]
    assert acc.count(TaxonomyKind.CATEGORY) == 3


def test_accumulator_is_safe_under_concurrent_adds() -> None:
    acc = TaxonomyAccumulator()
    names = [f"tag {i}" for i in range(50)]

    def worker() -> None:
        for _ in range(20):
            acc.add(TaxonomyKind.TAG, names)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert acc.count(TaxonomyKind.TAG) == 50
