from __future__ import annotations

from roster_sync.importers.student_profiles import build_import_row
from roster_sync.importers.user_roles import parse_user_role_csv
from roster_sync.services.collaborators import DryRunStore
from roster_sync.services.command_mapper import build_student_profile_values, build_upsert_profile_command


def test_dry_run_ids_are_stable_and_case_insensitive():
    store = DryRunStore()
    first = store.resolve_user_id("Alice@X.com")
    assert first == store.resolve_user_id("alice@x.com")
    assert first != store.resolve_user_id("bob@x.com")


def test_dry_run_known_emails():
    store = DryRunStore(known_emails={"Alice@X.com"})
    assert store.resolve_user_id("alice@x.com") is not None
    assert store.resolve_user_id("bob@x.com") is None


def test_dry_run_records_writes():
    store = DryRunStore()
    row = build_import_row({"primaryEmail": "a@x.com"}, 2)
    command = build_upsert_profile_command(build_student_profile_values(row, store.resolve_user_id("a@x.com")))
    store.begin()
    store.upsert_profile(command)
    role_row = parse_user_role_csv("primaryEmail,roles\na@x.com,Admin\n").rows[0]
    store.upsert_role_assignment(role_row)
    store.commit()
    assert store.profiles == [command]
    assert store.role_assignments == [role_row]
