"""Tests for the image upload/removal pipeline."""

import io
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine, select

from ishop.core.config import ImagePolicy
from ishop.core.errors import ErrorKind
from ishop.core.storage import LocalContentStore
from ishop.models.product import Image, Product
from ishop.repositories.image_repo import ImageRepository
from ishop.repositories.product_repo import ProductRepository
from ishop.schemas.image import IngestionStage
from ishop.services.image_service import ImageService, IncomingFile


def _blobs(store: LocalContentStore) -> list[Path]:
    if not store.folder_path.exists():
        return []
    return [p for p in store.folder_path.iterdir() if p.is_file()]


def _rows(session: Session) -> list[Image]:
    return session.exec(select(Image)).all()


def _boom(*args, **kwargs):
    raise SQLAlchemyError("database is gone")


class TestUpload:
    def test__png_within_policy__is_stored_and_recorded(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()
        content = b"\x89PNG" + b"\x00" * (500 * 1024 - 4)

        result = image_service.upload(test_db_session, str(product.id), make_file("photo.png", content))

        assert result.success is True
        assert result.error_kind is None
        assert result.stage == IngestionStage.DONE
        assert result.payload.product_id == product.id
        assert result.payload.file_name.endswith(".png")
        assert result.payload.url == f"/media/images/{result.payload.file_name}"

        rows = _rows(test_db_session)
        assert len(rows) == 1
        assert rows[0].product_id == product.id
        assert rows[0].file_name == result.payload.file_name
        assert store.path_for(rows[0].file_name).stat().st_size == len(content)

    def test__pdf__is_rejected_without_side_effects(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()

        result = image_service.upload(test_db_session, str(product.id), make_file("doc.pdf", b"%" * 10 * 1024))

        assert result.success is False
        assert result.error_kind == ErrorKind.UNSUPPORTED_TYPE
        assert result.stage == IngestionStage.ABORTED
        assert ".pdf" in result.message
        assert result.payload is None
        assert _rows(test_db_session) == []
        assert _blobs(store) == []

    def test__file_without_extension__is_unsupported(
        self, image_service, test_db_session, create_product, make_file
    ):
        product = create_product()

        result = image_service.upload(test_db_session, product.id, make_file("README", b"data"))

        assert result.error_kind == ErrorKind.UNSUPPORTED_TYPE

    @pytest.mark.parametrize("file_name", ["PHOTO.JPG", "Holiday.Png"])
    def test__extension_match_is_case_insensitive(
        self, image_service, test_db_session, create_product, make_file, file_name
    ):
        product = create_product()

        result = image_service.upload(test_db_session, product.id, make_file(file_name, b"abc"))

        assert result.success is True
        assert result.payload.file_name.endswith(file_name[file_name.rfind(".") :].lower())

    def test__empty_file__reports_empty_input(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()

        result = image_service.upload(test_db_session, product.id, make_file("photo.png", b""))

        assert result.error_kind == ErrorKind.EMPTY_INPUT
        assert _blobs(store) == []
        assert _rows(test_db_session) == []

    def test__missing_file__reports_empty_input(self, image_service, store, test_db_session, create_product):
        product = create_product()

        result = image_service.upload(test_db_session, product.id, None)

        assert result.error_kind == ErrorKind.EMPTY_INPUT
        assert _blobs(store) == []

    def test__file_over_max_bytes__reports_oversize(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()
        content = b"x" * (2 * 1024 * 1024 + 1)

        result = image_service.upload(test_db_session, product.id, make_file("big.png", content))

        assert result.error_kind == ErrorKind.OVERSIZE
        assert _blobs(store) == []
        assert _rows(test_db_session) == []

    def test__file_exactly_max_bytes__is_accepted(self, store, test_db_session, create_product, make_file):
        service = ImageService(
            ImageRepository(), ProductRepository(), store, ImagePolicy(16, {".png"})
        )
        product = create_product()

        result = service.upload(test_db_session, product.id, make_file("edge.png", b"x" * 16))

        assert result.success is True

    def test__dot_only_name__keeps_extension_in_stored_name(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()

        result = image_service.upload(test_db_session, product.id, make_file(".png", b"abc"))

        assert result.success is True
        assert result.payload.file_name.endswith(".png")
        assert store.exists(result.payload.file_name)

    def test__stream_longer_than_declared_size__reports_oversize(
        self, store, test_db_session, create_product
    ):
        service = ImageService(
            ImageRepository(), ProductRepository(), store, ImagePolicy(16, {".png"})
        )
        product = create_product()
        lying = IncomingFile(file_name="lie.png", size=3, stream=io.BytesIO(b"x" * 32))

        result = service.upload(test_db_session, product.id, lying)

        assert result.error_kind == ErrorKind.OVERSIZE
        assert result.stage == IngestionStage.ABORTED
        assert _blobs(store) == []
        assert _rows(test_db_session) == []

    def test__unknown_product__reports_not_found(self, image_service, store, test_db_session, make_file):
        result = image_service.upload(test_db_session, str(uuid.uuid4()), make_file("photo.png", b"abc"))

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.stage == IngestionStage.ABORTED
        assert _blobs(store) == []

    def test__product_check_runs_before_validation(self, image_service, test_db_session, make_file):
        result = image_service.upload(test_db_session, str(uuid.uuid4()), make_file("doc.pdf", b""))

        assert result.error_kind == ErrorKind.NOT_FOUND

    def test__malformed_product_id__reports_not_found(self, image_service, test_db_session, make_file):
        result = image_service.upload(test_db_session, "not-a-guid", make_file("photo.png", b"abc"))

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert "not-a-guid" in result.message

    def test__two_uploads_for_same_product__get_distinct_names(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()

        first = image_service.upload(test_db_session, product.id, make_file("a.png", b"first"))
        second = image_service.upload(test_db_session, product.id, make_file("a.png", b"second"))

        assert first.success and second.success
        assert first.payload.file_name != second.payload.file_name
        assert len(_rows(test_db_session)) == 2
        assert len(_blobs(store)) == 2

    def test__write_failure__reports_io_failure(self, tmp_path, test_db_session, create_product, make_file, policy):
        blocked = tmp_path / "blocked"
        blocked.write_bytes(b"")  # a file where the store root directory should be
        service = ImageService(ImageRepository(), ProductRepository(), LocalContentStore(blocked), policy)
        product = create_product()

        result = service.upload(test_db_session, product.id, make_file("photo.png", b"abc"))

        assert result.error_kind == ErrorKind.IO_FAILURE
        assert result.stage == IngestionStage.ABORTED
        assert _rows(test_db_session) == []

    def test__commit_failure__reports_persistence_failure_and_discards_blob(
        self, image_service, store, test_db_session, create_product, make_file, monkeypatch
    ):
        product = create_product()
        monkeypatch.setattr(test_db_session, "commit", _boom)

        result = image_service.upload(test_db_session, product.id, make_file("photo.png", b"abc"))

        assert result.success is False
        assert result.error_kind == ErrorKind.PERSISTENCE_FAILURE
        assert _blobs(store) == []
        assert _rows(test_db_session) == []


class TestConcurrentUpload:
    def test__parallel_uploads_for_same_product__both_succeed(self, tmp_path, image_service, store):
        # A file database so every worker gets its own connection
        engine = create_engine(
            f"sqlite:///{tmp_path / 'catalog.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        SQLModel.metadata.create_all(engine)
        try:
            with Session(engine) as session:
                product = Product(name="Shared", slug="shared", price=1.0)
                session.add(product)
                session.commit()
                product_id = product.id

            start = threading.Barrier(2, timeout=10)

            def _upload(content: bytes):
                start.wait()
                with Session(engine) as session:
                    file = IncomingFile(file_name="same.png", size=len(content), stream=io.BytesIO(content))
                    return image_service.upload(session, product_id, file)

            with ThreadPoolExecutor(max_workers=2) as pool:
                results = list(pool.map(_upload, [b"first", b"second"]))

            assert all(r.success for r in results), [r.message for r in results]
            names = {r.payload.file_name for r in results}
            assert len(names) == 2
            assert {p.name for p in _blobs(store)} == names
            with Session(engine) as session:
                assert {row.file_name for row in _rows(session)} == names
        finally:
            engine.dispose()


class TestRemove:
    def test__remove__deletes_row_and_blob(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()
        uploaded = image_service.upload(test_db_session, product.id, make_file("photo.png", b"abc"))
        file_name = uploaded.payload.file_name

        result = image_service.remove(test_db_session, str(uploaded.payload.id))

        assert result.success is True
        assert result.error_kind is None
        assert _rows(test_db_session) == []
        assert not store.exists(file_name)

    def test__unknown_id__reports_not_found_and_mutates_nothing(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()
        image_service.upload(test_db_session, product.id, make_file("photo.png", b"abc"))

        result = image_service.remove(test_db_session, str(uuid.uuid4()))

        assert result.success is False
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert len(_rows(test_db_session)) == 1
        assert len(_blobs(store)) == 1

    def test__malformed_id__reports_not_found(self, image_service, test_db_session):
        result = image_service.remove(test_db_session, "123")

        assert result.error_kind == ErrorKind.NOT_FOUND

    def test__blob_already_missing__still_removes_row(
        self, image_service, store, test_db_session, create_product, make_file
    ):
        product = create_product()
        uploaded = image_service.upload(test_db_session, product.id, make_file("photo.png", b"abc"))
        store.path_for(uploaded.payload.file_name).unlink()

        result = image_service.remove(test_db_session, uploaded.payload.id)

        assert result.success is True
        assert _rows(test_db_session) == []

    def test__commit_failure__keeps_row_and_blob(
        self, image_service, store, test_db_session, create_product, make_file, monkeypatch
    ):
        product = create_product()
        uploaded = image_service.upload(test_db_session, product.id, make_file("photo.png", b"abc"))
        monkeypatch.setattr(test_db_session, "commit", _boom)

        result = image_service.remove(test_db_session, uploaded.payload.id)

        assert result.error_kind == ErrorKind.PERSISTENCE_FAILURE
        assert store.exists(uploaded.payload.file_name)
        assert len(_rows(test_db_session)) == 1


class TestReads:
    def test__list_images__returns_images_of_product(
        self, image_service, test_db_session, create_product, make_file
    ):
        product = create_product()
        other = create_product()
        image_service.upload(test_db_session, product.id, make_file("a.png", b"a"))
        image_service.upload(test_db_session, other.id, make_file("b.png", b"b"))

        images = image_service.list_images(test_db_session, product.id)

        assert len(images) == 1
        assert images[0].product_id == product.id
