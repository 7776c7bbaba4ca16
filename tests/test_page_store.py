import json
import threading

import pytest

from landing_page_composer.models.action import Change, GenerateAction, PatchAction, to_generate_action
from landing_page_composer.models.page import OutcomeKind
from landing_page_composer.page_store import (
    APPLY_CHANGES_HINT,
    ActionNotApplicableError,
    PageNotFoundError,
    PageStore,
    unapplied_change_hint,
)


def test_generate_message_creates_document(starter_document):
    store = PageStore()
    page = store.create_page(name="Launch")
    message = "Done!\n```json\n" + to_generate_action(starter_document).model_dump_json(by_alias=True) + "\n```"

    parsed, updated, outcome = store.apply_message(page.id, message)

    assert parsed.text == "Done!"
    assert outcome.kind is OutcomeKind.generated
    assert outcome.applied == 0
    assert updated.version == 1
    assert updated.document.to_wire() == starter_document.to_wire()


def test_generate_with_empty_sections_replaces_document(starter_document):
    store = PageStore()
    page = store.create_page(name="Launch", document=starter_document)
    payload = {
        "action": "generate",
        "sections": [],
        "theme": starter_document.theme.to_wire(),
        "metadata": starter_document.metadata.to_wire(),
    }
    message = "Starting over.\n```json\n" + json.dumps(payload) + "\n```"

    _, updated, outcome = store.apply_message(page.id, message)

    assert outcome.kind is OutcomeKind.generated
    assert outcome.applied == 0
    assert updated.document.sections == []
    assert updated.document.theme == starter_document.theme
    assert updated.version == 2


def test_generate_missing_sections_is_ignored(starter_document):
    store = PageStore()
    page = store.create_page(name="Launch")

    updated, outcome = store.apply_action(
        page.id,
        GenerateAction(theme=starter_document.theme, metadata=starter_document.metadata),
    )

    assert outcome.kind is OutcomeKind.ignored
    assert updated.document is None
    assert updated.version == 0


def test_replace_document_and_list_pages(starter_document):
    store = PageStore()
    first = store.create_page(name="First")
    second = store.create_page(name="Second", document=starter_document)

    replaced = store.replace_document(first.id, starter_document)

    assert replaced.version == 1
    assert replaced.document.to_wire() == starter_document.to_wire()
    assert [revision.kind for revision in replaced.history] == [OutcomeKind.generated]
    assert {page.id for page in store.list_pages()} == {first.id, second.id}
    with pytest.raises(PageNotFoundError):
        store.replace_document("page_missing", starter_document)


def test_patch_bumps_version_and_reports_skips(starter_document):
    store = PageStore()
    page = store.create_page(name="Launch", document=starter_document)

    updated, outcome = store.apply_changes(
        page.id,
        [
            Change(op="replace", path="/sections/0/props/headline", value="Launch faster"),
            Change(op="remove", path="/sections/42"),
        ],
    )

    assert outcome.kind is OutcomeKind.patched
    assert (outcome.applied, outcome.skipped) == (1, 1)
    assert outcome.skip_reasons == ["index_out_of_range"]
    assert updated.version == 2
    assert updated.document.sections[0].props["headline"] == "Launch faster"
    assert [revision.kind for revision in updated.history] == [OutcomeKind.generated, OutcomeKind.patched]


def test_records_are_snapshots(starter_document):
    store = PageStore()
    page = store.create_page(name="Launch", document=starter_document)
    before = store.get_page(page.id)

    store.apply_changes(page.id, [Change(op="replace", path="/metadata/title", value="Renamed")])

    assert before.document.metadata.title == "Launchpad"
    assert store.get_page(page.id).document.metadata.title == "Renamed"


def test_patch_without_document_is_rejected():
    store = PageStore()
    page = store.create_page(name="Empty")

    with pytest.raises(ActionNotApplicableError):
        store.apply_action(page.id, PatchAction(changes=[Change(op="remove", path="/sections/0")]))


def test_patch_message_without_document_is_ignored():
    store = PageStore()
    page = store.create_page(name="Empty")
    message = '```json\n{"action": "patch", "changes": [{"op": "remove", "path": "/sections/0"}]}\n```'

    _, updated, outcome = store.apply_message(page.id, message)

    assert outcome.kind is OutcomeKind.ignored
    assert updated.document is None


def test_unknown_page_raises():
    store = PageStore()

    with pytest.raises(PageNotFoundError):
        store.get_page("page_missing")
    with pytest.raises(KeyError):
        store.apply_changes("page_missing", [])


def test_prose_describing_changes_gets_a_hint(starter_document):
    store = PageStore()
    page = store.create_page(name="Launch", document=starter_document)

    _, _, outcome = store.apply_message(page.id, "I'll update the hero headline for you.")

    assert outcome.kind is OutcomeKind.no_action
    assert outcome.hint == APPLY_CHANGES_HINT


def test_hint_conditions():
    assert unapplied_change_hint("Let me Modify that", has_document=True) == APPLY_CHANGES_HINT
    assert unapplied_change_hint("Let me modify that", has_document=False) is None
    assert unapplied_change_hint("Looks great!", has_document=True) is None
    assert unapplied_change_hint("Updated:\n```json\n{oops\n```", has_document=True) is None
    assert unapplied_change_hint("Those are updates", has_document=True) is None


def test_concurrent_patches_are_serialized(starter_document):
    store = PageStore()
    page = store.create_page(name="Launch", document=starter_document)
    workers = 8

    def append_cta(n: int) -> None:
        store.apply_changes(
            page.id,
            [Change(op="add", path="/sections/-", value={"type": "cta", "props": {"n": n}})],
        )

    threads = [threading.Thread(target=append_cta, args=(n,)) for n in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    final = store.get_page(page.id)
    assert len(final.document.sections) == 3 + workers
    assert final.version == 1 + workers
