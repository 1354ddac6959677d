from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.core.exceptions import AlreadySignedError, NotFoundError
from app.db import crud
from app.modules.document_management import document_service
from app.schemas.analysis import SignatureData, SignatureRequest
from conftest import SIGNATURE_IMAGE, add_analysis, add_document


def test_documents_are_listed_newest_first_and_scoped_to_owner(db_session, user, other_user):
    base = datetime(2024, 5, 1, tzinfo=timezone.utc)
    older = add_document(db_session, user.id, file_name="older.pdf", created_at=base)
    newer = add_document(db_session, user.id, file_name="newer.pdf", created_at=base + timedelta(hours=1))
    add_document(db_session, other_user.id, file_name="foreign.pdf", created_at=base + timedelta(hours=2))

    documents = document_service.list_documents(db_session, user)

    assert [d.id for d in documents] == [newer.id, older.id]


def test_analyses_include_parent_file_name(db_session, user):
    document = add_document(db_session, user.id, file_name="Camden school tender.pdf")
    add_analysis(db_session, document)

    analyses = document_service.list_analyses(db_session, user)

    assert len(analyses) == 1
    assert analyses[0].document.file_name == "Camden school tender.pdf"


def test_foreign_analysis_is_not_found(db_session, user, other_user):
    analysis = add_analysis(db_session, add_document(db_session, other_user.id))

    with pytest.raises(NotFoundError):
        document_service.get_analysis_or_404(db_session, user, analysis.id)


def test_plain_delete_cascades_analyses_but_keeps_blob(db_session, store, user):
    document = add_document(db_session, user.id)
    store.objects[document.file_path] = b"%PDF"
    analysis = add_analysis(db_session, document)
    document_id, analysis_id, file_path = document.id, analysis.id, document.file_path
    db_session.expunge_all()

    assert document_service.delete_document(db_session, user, document_id) is True

    assert crud.get_document(db_session, document_id, user.id) is None
    assert crud.get_analysis(db_session, analysis_id, user.id) is None
    assert file_path in store.objects
    assert store.deleted == []


def test_delete_unknown_document_returns_false(db_session, user):
    assert document_service.delete_document(db_session, user, "missing") is False


def test_sign_stores_attestation(db_session, user):
    analysis = add_analysis(db_session, add_document(db_session, user.id))
    request = SignatureRequest(signature_image=SIGNATURE_IMAGE, name="  Jane Smith  ", consent=True)

    signed = document_service.sign_analysis(db_session, user, analysis.id, request)

    assert signed.signed_at is not None
    attestation = SignatureData.from_json(signed.signature_data)
    assert attestation.name == "Jane Smith"
    assert attestation.signature == SIGNATURE_IMAGE
    assert attestation.timestamp is not None


def test_second_signature_is_refused(db_session, user):
    analysis = add_analysis(db_session, add_document(db_session, user.id))
    first = SignatureRequest(signature_image=SIGNATURE_IMAGE, name="Jane Smith", consent=True)
    document_service.sign_analysis(db_session, user, analysis.id, first)
    original = crud.get_analysis(db_session, analysis.id, user.id).signature_data

    second = SignatureRequest(signature_image=SIGNATURE_IMAGE, name="John Doe", consent=True)
    with pytest.raises(AlreadySignedError):
        document_service.sign_analysis(db_session, user, analysis.id, second)

    assert crud.get_analysis(db_session, analysis.id, user.id).signature_data == original


@pytest.mark.parametrize("payload", [
    {"signature_image": "", "name": "Jane Smith", "consent": True},
    {"signature_image": "data:image/png;base64,", "name": "Jane Smith", "consent": True},
    {"signature_image": "data:image/jpeg;base64,abc", "name": "Jane Smith", "consent": True},
    {"signature_image": SIGNATURE_IMAGE, "name": "   ", "consent": True},
    {"signature_image": SIGNATURE_IMAGE, "name": "Jane Smith", "consent": False},
    {"signature_image": SIGNATURE_IMAGE, "name": "Jane Smith"},
])
def test_signature_request_requires_all_fields(payload):
    with pytest.raises(ValidationError):
        SignatureRequest(**payload)
