from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import NotFoundError, ShredError, ShredNotConfirmedError
from app.db import crud
from app.modules.document_management.shredder import DocumentShredder, ShredStage
from conftest import add_analysis, add_document


@pytest.fixture
def analysed_document(db_session, store, user):
    document = add_document(db_session, user.id, status="analyzed")
    store.objects[document.file_path] = b"%PDF"
    analysis = add_analysis(db_session, document)
    return document, analysis


def _shredder(db_session, store, user, document, analysis, events=None):
    return DocumentShredder(
        db_session, store, user,
        analysis_id=analysis.id,
        document_id=document.id,
        on_progress=events.append if events is not None else None,
    )


@pytest.mark.parametrize("value, enabled", [
    ("SHRED", True),
    ("shred", False),
    ("Shred", False),
    ("SHRED ", False),
    ("", False),
])
def test_confirmation_must_match_exactly(db_session, store, user, analysed_document, value, enabled):
    shredder = _shredder(db_session, store, user, *analysed_document)

    shredder.set_confirmation(value)

    assert shredder.can_shred is enabled


def test_unconfirmed_shred_does_nothing(db_session, store, user, analysed_document):
    document, analysis = analysed_document
    shredder = _shredder(db_session, store, user, document, analysis)
    shredder.set_confirmation("shred")

    with pytest.raises(ShredNotConfirmedError):
        shredder.shred()

    assert shredder.stage == ShredStage.confirm
    assert crud.get_analysis(db_session, analysis.id, user.id) is not None
    assert document.file_path in store.objects


def test_cancel_clears_confirmation(db_session, store, user, analysed_document):
    shredder = _shredder(db_session, store, user, *analysed_document)
    shredder.set_confirmation("SHRED")

    shredder.cancel()

    assert shredder.stage == ShredStage.confirm
    assert not shredder.can_shred


def test_shred_removes_analysis_blob_and_document(db_session, store, user, analysed_document):
    document, analysis = analysed_document
    document_id, analysis_id, file_path = document.id, analysis.id, document.file_path
    events = []
    shredder = _shredder(db_session, store, user, document, analysis, events)
    shredder.set_confirmation("SHRED")

    shredder.shred()

    assert shredder.stage == ShredStage.complete
    assert shredder.progress == 100
    assert shredder.blob_deleted is True
    assert events == [20, 50, 70, 85, 100]
    assert store.deleted == [file_path]
    assert crud.get_analysis(db_session, analysis_id, user.id) is None
    assert crud.get_document(db_session, document_id, user.id) is None


def test_document_without_path_skips_storage(db_session, store, user):
    document = add_document(db_session, user.id, file_path=None)
    analysis = add_analysis(db_session, document)
    document_id = document.id
    shredder = _shredder(db_session, store, user, document, analysis)
    shredder.set_confirmation("SHRED")

    shredder.shred()

    assert shredder.stage == ShredStage.complete
    assert shredder.blob_deleted is False
    assert store.deleted == []
    assert crud.get_document(db_session, document_id, user.id) is None


def test_storage_failure_returns_to_confirm(db_session, store, user, analysed_document):
    document, analysis = analysed_document
    document_id, analysis_id = document.id, analysis.id
    store.fail_on.add("delete")
    shredder = _shredder(db_session, store, user, document, analysis)
    shredder.set_confirmation("SHRED")

    with pytest.raises(ShredError) as exc_info:
        shredder.shred()

    assert exc_info.value.message == "Failed to shred document"
    assert shredder.stage == ShredStage.confirm
    assert shredder.progress == 0
    # Lo ya borrado no se restaura: el análisis desaparece, el documento sigue
    assert crud.get_analysis(db_session, analysis_id, user.id) is None
    assert crud.get_document(db_session, document_id, user.id) is not None


def test_database_failure_returns_to_confirm(db_session, store, user, analysed_document):
    document, analysis = analysed_document
    shredder = _shredder(db_session, store, user, document, analysis)
    shredder.set_confirmation("SHRED")

    with patch.object(crud, "delete_analysis", side_effect=OperationalError("DELETE", {}, Exception("db down"))):
        with pytest.raises(ShredError):
            shredder.shred()

    assert shredder.stage == ShredStage.confirm
    assert shredder.progress == 0
    assert store.deleted == []


def test_document_must_be_the_parent_of_the_analysis(db_session, store, user, analysed_document):
    document, analysis = analysed_document
    unrelated = add_document(db_session, user.id, file_path=f"{user.id}/1700000000001_other.pdf")
    store.objects[unrelated.file_path] = b"%PDF"
    document_id, analysis_id, unrelated_id = document.id, analysis.id, unrelated.id
    shredder = DocumentShredder(db_session, store, user, analysis_id=analysis_id, document_id=unrelated_id)
    shredder.set_confirmation("SHRED")

    with pytest.raises(NotFoundError):
        shredder.shred()

    assert shredder.stage == ShredStage.confirm
    assert store.deleted == []
    assert crud.get_analysis(db_session, analysis_id, user.id) is not None
    assert crud.get_document(db_session, document_id, user.id) is not None
    assert crud.get_document(db_session, unrelated_id, user.id) is not None
