import threading
from datetime import timedelta

import pytest

from app.models.listing import ListingStatus
from app.models.user import User
from app.services import listing_service, user_service
from app.services.image_storage import ImageRejected, ImageStorage
from app.services.otp_service import OtpCheck, OtpStore, is_valid_phone


def test_transaction_rolls_back_on_error(db):
    db.users.append(User(phone="9000000001", name="Original"))
    before = db.users.path.read_bytes()

    with pytest.raises(RuntimeError):
        with db.users.transaction() as users:
            users[0] = users[0].model_copy(update={"name": "Changed"})
            raise RuntimeError("boom")

    assert db.users.path.read_bytes() == before
    assert db.users.load()[0].name == "Original"


def test_load_skips_malformed_rows_and_tolerates_missing_columns(db):
    db.users.path.write_text(
        "phone,name,state,city,userType,isVerified\n"
        "9000000001,Anil,Delhi,Delhi,consumer,true\n"
        ",NoPhone,,,,\n",
        encoding="utf-8",
    )

    users = db.users.load()

    assert [user.phone for user in users] == ["9000000001"]
    assert users[0].email == ""


def test_rewrite_quotes_commas(db):
    db.users.rewrite([User(phone="9000000001", address="Flat 2, MG Road")])

    assert db.users.load()[0].address == "Flat 2, MG Road"
    assert not list(db.data_dir.glob(".users.csv.*"))


def test_upsert_without_all_fields_returns_stored_record(db):
    first = user_service.upsert_on_verify(db, "9000000001", "Anil", "Delhi", "Delhi", "consumer")
    again = user_service.upsert_on_verify(db, "9000000001", None, "Punjab", None, None)

    assert again == first
    assert user_service.get_by_phone(db, "9000000001").state == "Delhi"


def test_upsert_keeps_profile_contact_details(db):
    user_service.upsert_on_verify(db, "9000000001", "Anil", "Delhi", "Delhi", "consumer")
    user_service.update_profile(db, "9000000001", {"email": "anil@example.com"})

    updated = user_service.upsert_on_verify(db, "9000000001", "Anil", "Punjab", "Amritsar", "consumer")

    assert updated.email == "anil@example.com"
    assert (updated.state, updated.city) == ("Punjab", "Amritsar")


def test_status_change_is_idempotent(db, tmp_path):
    images = ImageStorage(tmp_path / "images")
    listing = listing_service.submit(db, images, "Cetirizine", "2026-03-01", "opened", None, "x.png")

    assert listing_service.approve(db, listing.id)
    assert listing_service.approve(db, listing.id)
    assert [item.id for item in listing_service.list_approved(db)] == [listing.id]
    assert listing_service.list_pending(db) == []
    assert db.listings.load()[0].status == ListingStatus.approved


def test_submit_discards_image_on_validation_error(db, tmp_path):
    images = ImageStorage(tmp_path / "images")
    stored = images.save(b"data", "pill.jpg", "image/jpeg")

    with pytest.raises(listing_service.ListingValidationError):
        listing_service.submit(db, images, "", "2026-03-01", "opened", "10", stored)

    assert not images.exists(stored)


def test_image_storage_limits(tmp_path):
    images = ImageStorage(tmp_path / "images", max_bytes=4)

    with pytest.raises(ImageRejected):
        images.save(b"12345", "big.png", "image/png")
    with pytest.raises(ImageRejected):
        images.save(b"", "empty.png", "image/png")
    assert list(images.directory.iterdir()) == []

    name = images.save(b"1234", "Small.PNG", "image/png")
    assert name.endswith(".png")
    assert len(name) == 36
    assert images.public_path(name) == f"/images/medicines/{name}"


@pytest.mark.parametrize(
    "phone, expected",
    [("9876543210", True), ("987654321", False), ("98765432100", False), ("98765-4321", False), (None, False)],
)
def test_is_valid_phone(phone, expected):
    assert is_valid_phone(phone) is expected


def test_otp_store_redeem_and_expiry(clock):
    store = OtpStore(ttl=timedelta(minutes=5), code_factory=lambda: "654321", clock=clock)

    store.issue("9876543210")
    assert store.verify("9876543210", "111111") == OtpCheck.mismatch
    assert store.verify("9876543210", "654321") == OtpCheck.ok
    assert store.redeem("9876543210", "111111") == OtpCheck.mismatch
    assert store.redeem("9876543210", "654321") == OtpCheck.ok
    assert store.verify("9876543210", "654321") == OtpCheck.missing

    store.issue("9876543210")
    clock.advance(minutes=6)
    assert store.verify("9876543210", "654321") == OtpCheck.missing
    assert len(store) == 0


def test_generated_codes_are_six_digits():
    store = OtpStore()

    code = store.issue("9876543210")

    assert len(code) == 6 and code.isdigit()


def test_concurrent_redeem_succeeds_once(clock):
    store = OtpStore(code_factory=lambda: "654321", clock=clock)
    store.issue("9876543210")
    workers = 8
    barrier = threading.Barrier(workers)
    results = []
    results_lock = threading.Lock()

    def redeem():
        barrier.wait()
        check = store.redeem("9876543210", "654321")
        with results_lock:
            results.append(check)

    threads = [threading.Thread(target=redeem) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(OtpCheck.ok) == 1
    assert results.count(OtpCheck.missing) == workers - 1


def test_status_change_keeps_unreadable_listing_rows(db):
    db.listings.path.write_text(
        "id,name,expiry,condition,price,timestamp,image,status\n"
        "aaa,Old,2025-01-01,sealed,0,2024-01-01T00:00:00.000Z,a.png,archived\n"
        "bbb,New,2026-01-01,sealed,0,2025-01-01T00:00:00.000Z,b.png,pending\n",
        encoding="utf-8",
    )

    assert listing_service.approve(db, "bbb")

    content = db.listings.path.read_text(encoding="utf-8")
    assert "aaa,Old,2025-01-01,sealed,0,2024-01-01T00:00:00.000Z,a.png,archived" in content
    assert [listing.id for listing in listing_service.list_approved(db)] == ["bbb"]


def test_profile_update_keeps_unreadable_user_rows(db):
    db.users.path.write_text(
        "phone,name,email,address,state,city,userType,isVerified\n"
        ",Ghost,,,,,consumer,true\n"
        "9000000001,Anil,,,Delhi,Delhi,consumer,true\n",
        encoding="utf-8",
    )

    user_service.update_profile(db, "9000000001", {"email": "anil@example.com"})

    lines = db.users.path.read_text(encoding="utf-8").splitlines()
    assert ",Ghost,,,,,consumer,true" in lines
    assert user_service.get_by_phone(db, "9000000001").email == "anil@example.com"


def test_rejected_upload_is_logged(tmp_path, caplog):
    images = ImageStorage(tmp_path / "images")

    with caplog.at_level("INFO", logger="app.services.image_storage"):
        with pytest.raises(ImageRejected):
            images.save(b"hello", "notes.txt", "text/plain")

    assert "Rejected upload notes.txt" in caplog.text
