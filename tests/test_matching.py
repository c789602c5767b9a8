"""Tests for matching ingredients against an inventory snapshot."""

from brew_invoice.matching import find_entry, match_ingredient, match_ingredients, suggest_similar
from brew_invoice.models import CatalogEntry, Fermentable, Hop


def _entry(id: str, name: str, amount: float = 0.0, unit: str = "kg") -> CatalogEntry:
    return CatalogEntry(id=id, name=name, current_amount=amount, unit=unit)


def _malt(name: str) -> Fermentable:
    return Fermentable(name=name, sub_type="Base", amount=25, cost=0.84)


def _hop(name: str) -> Hop:
    return Hop(name=name, sub_type="Pellet", amount=100, cost=0.06)


MALTS = [
    _entry("m1", "Crisp Maris Otter Pale Malt"),
    _entry("m2", "Maris Otter Pale Malt", 10.0),
    _entry("m3", "Munich Malt"),
]


class TestFindEntry:
    def test_exact_name_is_high_confidence(self):
        entry, confidence = find_entry("maris otter pale malt", MALTS)
        assert entry.id == "m2"
        assert confidence == "high"

    def test_exact_match_beats_earlier_prefix_match(self):
        # m1 contains the prefix but m2 is an exact match
        entry, _ = find_entry("Maris Otter Pale Malt", MALTS)
        assert entry.id == "m2"

    def test_prefix_containment_is_medium_confidence(self):
        entry, confidence = find_entry("Maris Otter Pale Malt (Warminster)", MALTS)
        assert entry.id == "m1"
        assert confidence == "medium"

    def test_catalog_name_inside_ingredient_name(self):
        entry, confidence = find_entry("Munich Malt Light 15 EBC", MALTS)
        assert entry.id == "m3"
        assert confidence == "medium"

    def test_first_catalog_entry_wins_ties(self):
        entries = [_entry("a", "Citra Hop Pellets 2023"), _entry("b", "Citra Hop Pellets 2024")]
        entry, _ = find_entry("Citra Hop Pellets", entries)
        assert entry.id == "a"

    def test_longer_prefix_is_stricter(self):
        entries = [_entry("x", "Maris Otter Pale Ale Malt")]
        assert find_entry("Maris Otter Pale Malt", entries, prefix_length=15)[0] is not None
        assert find_entry("Maris Otter Pale Malt", entries, prefix_length=20) == (None, None)

    def test_nameless_entries_are_ignored(self):
        assert find_entry("Pale", [_entry("z", "")]) == (None, None)

    def test_no_match(self):
        assert find_entry("Vienna", MALTS) == (None, None)


def test_suggest_similar_shares_words():
    hops = [_entry("h1", "Citra T90"), _entry("h2", "Cascade"), _entry("h3", "Citra Cryo")]
    assert [e.id for e in suggest_similar("Citra Hop Pellets", hops)] == ["h1", "h3"]


def test_suggest_similar_limit():
    entries = [_entry(str(i), f"Pale Malt {i}") for i in range(5)]
    assert len(suggest_similar("Extra Pale", entries)) == 3


def test_match_ingredient_found():
    result = match_ingredient(_malt("Maris Otter Pale Malt"), MALTS)
    assert result.found
    assert result.catalog_entry.current_amount == 10.0
    assert result.suggestions == ()


def test_match_ingredient_not_found_has_suggestions():
    result = match_ingredient(_malt("Vienna Malt"), MALTS)
    assert not result.found
    assert result.catalog_entry is None
    assert result.confidence is None
    assert [e.id for e in result.suggestions] == ["m1", "m2", "m3"]


def test_match_ingredients_uses_own_category():
    snapshots = {"fermentable": MALTS, "hop": [_entry("h1", "Munich Malt")]}
    results = match_ingredients([_malt("Munich Malt"), _hop("Munich Malt Hop")], snapshots)
    assert results["Munich Malt"].catalog_entry.id == "m3"
    assert results["Munich Malt Hop"].catalog_entry.id == "h1"


def test_match_ingredients_missing_category():
    results = match_ingredients([_hop("Citra")], {"fermentable": MALTS})
    assert not results["Citra"].found
