"""Tests for partitioning records by site address."""

from migration.grouping import address_matches, group_by_site, records_for, site_addresses

from helpers import SITE_A, SITE_B, make_record


class TestSiteAddresses:
    def test_sorted_and_unique(self):
        records = [make_record("a.zip", SITE_B), make_record("b.zip", SITE_A), make_record("c.zip", SITE_B)]
        assert site_addresses(records) == [SITE_A, SITE_B]

    def test_trailing_segments_fold_into_site(self):
        records = [
            make_record("a.zip", SITE_A),
            make_record("b.zip", SITE_A + "/Shared Documents"),
        ]
        assert site_addresses(records) == [SITE_A]

    def test_similar_prefix_is_a_different_site(self):
        records = [make_record("a.zip", SITE_A), make_record("b.zip", SITE_A + "-old")]
        assert site_addresses(records) == [SITE_A, SITE_A + "-old"]

    def test_case_variants_are_one_site(self):
        shouted = SITE_A.replace("archive-a", "Archive-A")
        records = [make_record("a.zip", shouted), make_record("b.zip", SITE_A), make_record("c.zip", SITE_B)]

        assert site_addresses(records) == [shouted, SITE_B]

    def test_empty(self):
        assert site_addresses([]) == []


class TestRecordsFor:
    def test_matches_trailing_segments(self):
        nested = make_record("b.zip", SITE_A + "/Shared Documents/Archive")
        records = [make_record("a.zip", SITE_A), nested, make_record("c.zip", SITE_B)]

        assert [r.name for r in records_for(SITE_A, records)] == ["a.zip", "b.zip"]

    def test_does_not_match_partial_segment(self):
        assert not address_matches(SITE_A, SITE_A + "-old")
        assert address_matches(SITE_A + "/", SITE_A)

    def test_matching_ignores_case(self):
        assert address_matches(SITE_A.upper(), SITE_A + "/Shared Documents")


class TestGroupBySite:
    def test_groups_form_a_partition(self):
        records = [
            make_record("a.zip", SITE_A),
            make_record("b.zip", SITE_B),
            make_record("c.zip", SITE_A + "/Shared Documents"),
            make_record("d.zip", SITE_A + "-old"),
            make_record("e.zip", SITE_B),
        ]

        groups = group_by_site(records)

        grouped = [r for g in groups for r in g.records]
        assert len(grouped) == len(records)
        assert {r.name for r in grouped} == {r.name for r in records}
        names_per_group = [{r.name for r in g.records} for g in groups]
        for i, first in enumerate(names_per_group):
            for second in names_per_group[i + 1:]:
                assert first.isdisjoint(second)

    def test_group_order_and_contents(self):
        records = [make_record("a.zip", SITE_B), make_record("b.zip", SITE_A), make_record("c.zip", SITE_B)]

        groups = group_by_site(records)

        assert [g.address for g in groups] == [SITE_A, SITE_B]
        assert [r.name for r in groups[1].records] == ["a.zip", "c.zip"]
        assert len(groups[0]) == 1

    def test_case_variants_share_one_group(self):
        shouted = SITE_A.replace("archive-a", "Archive-A")
        records = [make_record("a.zip", shouted), make_record("b.zip", SITE_A + "/Shared Documents")]

        groups = group_by_site(records)

        assert len(groups) == 1
        assert groups[0].address == shouted
        assert [r.name for r in groups[0].records] == ["a.zip", "b.zip"]
