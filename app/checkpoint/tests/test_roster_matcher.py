from types import SimpleNamespace

import pytest

from checkpoint.controller.roster_matcher import (RosterCandidate, matches, parse_roster_csv, resolve_field,
                                                  resolve_name, roster_check_required, row_matches)


def _upload(rows, upload_id=1):
    return SimpleNamespace(id=upload_id, member_data=rows)


class TestAliasResolution:
    @pytest.mark.parametrize("header", ["name", "Fullname", "fullName", "fullname"])
    def test_name_aliases(self, header):
        assert resolve_name({header: "Amina Bello"}) == "Amina Bello"

    def test_name_built_from_first_and_last(self):
        assert resolve_name({"FirstName": "Amina", "lastName": "Bello"}) == "Amina Bello"

    def test_full_name_wins_over_parts(self):
        assert resolve_name({"Fullname": "A. Bello", "FirstName": "Amina", "LastName": "Bello"}) == "A. Bello"

    def test_empty_alias_falls_through_to_next(self):
        assert resolve_field({"email": "", "Email": "x@example.com"}, "email") == "x@example.com"

    @pytest.mark.parametrize("header", ["chandaNumber", "ChandaNO", "chandaNo", "chanda_number"])
    def test_membership_number_aliases(self, header):
        assert resolve_field({header: "CH-1"}, "membership_number") == "CH-1"


class TestRowMatching:
    def test_name_match_ignores_case_and_spaces(self):
        assert row_matches({"Fullname": "  amina BELLO "}, RosterCandidate(name="Amina Bello"))

    def test_email_match_ignores_case(self):
        assert row_matches({"emailAddress": "AMINA@Example.com"}, RosterCandidate(email="amina@example.com"))

    def test_membership_number_is_exact(self):
        row = {"ChandaNO": "CH-1001"}

        assert row_matches(row, RosterCandidate(membership_number="CH-1001"))
        assert not row_matches(row, RosterCandidate(membership_number="ch-1001"))

    def test_empty_row_fields_never_match_empty_candidate(self):
        assert not row_matches({"name": "", "email": ""}, RosterCandidate())

    def test_matches_any_row_of_any_upload(self):
        uploads = [
            _upload([{"name": "Someone Else"}], 1),
            _upload([{"name": "Other"}, {"email": "amina@example.com"}], 2),
        ]

        assert matches(uploads, RosterCandidate(name="Amina Bello", email="amina@example.com"))
        assert not matches(uploads, RosterCandidate(name="Nobody"))


class TestGatePolicy:
    def test_no_uploads_means_no_check(self):
        assert not roster_check_required([], "member")

    def test_only_members_are_gated(self):
        uploads = [_upload([{"name": "x"}])]

        assert roster_check_required(uploads, "member")
        assert not roster_check_required(uploads, "guest")
        assert not roster_check_required(uploads, "invitee")


class TestParseRosterCsv:
    def test_parses_rows_and_trims(self):
        content = "\ufeffFullname , Email,ChandaNO\n Amina Bello ,amina@example.com,CH-1001\n\n,,\nTunde Ade,,CH-2\n"

        rows = parse_roster_csv(content)

        assert rows == [
            {"Fullname": "Amina Bello", "Email": "amina@example.com", "ChandaNO": "CH-1001"},
            {"Fullname": "Tunde Ade", "Email": "", "ChandaNO": "CH-2"},
        ]

    def test_header_only_is_rejected(self):
        with pytest.raises(ValueError):
            parse_roster_csv("name,email\n")

    def test_empty_file_is_rejected(self):
        with pytest.raises(ValueError):
            parse_roster_csv("")
