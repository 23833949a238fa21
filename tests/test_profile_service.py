import base64

import pytest

from app.application.services.profile_service import ProfileService
from app.exceptions import NotFound, PayloadTooLarge, ValidationError
from app.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository

from .conftest import make_png_base64

PHONE = "03001234567"


@pytest.fixture
def repo(session):
    repo = SqlUserRepository(session)
    repo.get_or_create(PHONE, default_role="buyer")
    return repo


@pytest.fixture
def svc(repo, audit):
    return ProfileService(user_repo=repo, audit_logger=audit)


def provider_docs():
    return dict(
        cnic_front_base64=make_png_base64((10, 10, 10)),
        cnic_back_base64=make_png_base64((20, 20, 20)),
        selfie_base64=make_png_base64((30, 30, 30)),
    )


def test_save_buyer_profile(svc, png_b64):
    view = svc.save_profile(PHONE, role="buyer", name="  Ali ", avatar_base64=png_b64)
    assert view.role == "buyer"
    assert view.user["phone"] == PHONE
    assert view.user["name"] == "Ali"
    assert view.user["avatarBase64"] == png_b64
    assert "verificationStatus" not in view.user


def test_avatar_data_url_prefix_is_stripped(svc, png_b64):
    view = svc.save_profile(PHONE, role="buyer", name="Ali", avatar_base64="data:image/png;base64," + png_b64)
    assert view.user["avatarBase64"] == png_b64


def test_buyer_save_keeps_existing_avatar_when_omitted(svc, png_b64):
    svc.save_profile(PHONE, role="buyer", name="Ali", avatar_base64=png_b64)
    view = svc.save_profile(PHONE, role="buyer", name="Ali Khan")
    assert view.user["name"] == "Ali Khan"
    assert view.user["avatarBase64"] == png_b64


@pytest.mark.parametrize("role", [None, "", "admin", "seller"])
def test_invalid_role(svc, role):
    with pytest.raises(ValidationError):
        svc.save_profile(PHONE, role=role, name="Ali")


@pytest.mark.parametrize("name", [None, "", "   ", "x" * 121])
def test_invalid_name(svc, name):
    with pytest.raises(ValidationError):
        svc.save_profile(PHONE, role="buyer", name=name)


def test_role_is_case_insensitive(svc):
    assert svc.save_profile(PHONE, role="Buyer", name="Ali").role == "buyer"


@pytest.mark.parametrize("missing", ["cnic_front_base64", "cnic_back_base64", "selfie_base64"])
def test_provider_requires_all_documents_and_persists_nothing(svc, repo, missing):
    docs = provider_docs()
    docs[missing] = None
    with pytest.raises(ValidationError) as exc:
        svc.save_profile(PHONE, role="provider", name="Ali", **docs)
    assert exc.value.message == "Provider verification required"

    user = repo.get_by_phone(PHONE)
    assert user.name is None
    assert user.role == "buyer"
    assert repo.get_provider_profile(user.id) is None


def test_provider_first_submission_is_pending(svc, repo):
    view = svc.save_profile(PHONE, role="provider", name="Ali", **provider_docs())
    assert view.role == "provider"
    assert view.verification_status == "pending"
    assert view.user["role"] == "provider"
    assert repo.count_documents(view.user["id"]) == 1


def test_provider_resubmission_keeps_review_decision(svc, repo):
    first = svc.save_profile(PHONE, role="provider", name="Ali", **provider_docs())
    user_id = first.user["id"]
    repo.set_verification_status(user_id, "approved")

    second = svc.save_profile(PHONE, role="provider", name="Ali Khan", **provider_docs())
    assert second.verification_status == "approved"
    assert repo.count_documents(user_id) == 2

    repo.set_verification_status(user_id, "rejected")
    third = svc.save_profile(PHONE, role="provider", name="Ali Khan", **provider_docs())
    assert third.verification_status == "rejected"
    assert repo.count_documents(user_id) == 3


def test_switching_roles_keeps_one_active_profile(svc, repo):
    svc.save_profile(PHONE, role="provider", name="Ali", **provider_docs())
    user = repo.get_by_phone(PHONE)
    repo.set_verification_status(user.id, "approved")

    buyer = svc.save_profile(PHONE, role="buyer", name="Ali")
    assert buyer.role == "buyer"
    assert repo.get_provider_profile(user.id).is_active is False
    me = svc.get_profile(PHONE)
    assert me.role == "buyer"
    assert me.verification_status is None

    provider = svc.save_profile(PHONE, role="provider", name="Ali", **provider_docs())
    assert provider.verification_status == "approved"
    assert repo.get_provider_profile(user.id).is_active is True


def test_oversized_image_rejected_before_persistence(repo, audit):
    svc = ProfileService(user_repo=repo, audit_logger=audit, max_image_bytes=1000)
    with pytest.raises(PayloadTooLarge):
        svc.save_profile(PHONE, role="buyer", name="Ali", avatar_base64="A" * 4000)
    assert repo.get_by_phone(PHONE).name is None


def test_garbage_base64_rejected(svc):
    with pytest.raises(ValidationError):
        svc.save_profile(PHONE, role="buyer", name="Ali", avatar_base64="not base64!!")


def test_non_image_payload_rejected(svc):
    payload = base64.b64encode(b"hello, definitely not a picture").decode()
    with pytest.raises(ValidationError) as exc:
        svc.save_profile(PHONE, role="buyer", name="Ali", avatar_base64=payload)
    assert "not a valid image" in exc.value.message


def test_save_for_unknown_phone(svc):
    with pytest.raises(NotFound):
        svc.save_profile("03110000000", role="buyer", name="Ali")


def test_get_profile_not_found_before_first_save(svc):
    with pytest.raises(NotFound):
        svc.get_profile(PHONE)
    with pytest.raises(NotFound):
        svc.get_profile("03110000000")


def test_get_profile_returns_current_role(svc):
    svc.save_profile(PHONE, role="provider", name="Ali", **provider_docs())
    view = svc.get_profile(PHONE)
    assert view.role == "provider"
    assert view.user["verificationStatus"] == "pending"


def test_profile_saved_is_audited(svc, audit):
    svc.save_profile(PHONE, role="buyer", name="Ali")
    assert audit.actions() == ["profile_saved"]
